"""Request lifecycle and approval workflow engine for HR operations."""
