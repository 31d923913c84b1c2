# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class WorkflowError(Exception):
    """Base class for every error the request workflow surfaces to callers."""
    pass


class ValidationError(WorkflowError):
    """Malformed or incomplete input, raised before any mutation."""
    pass


class IllegalTransitionError(ValidationError):
    """A post-approval transition was attempted out of order."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move request from '{current}' to '{requested}'")


class NotFoundError(WorkflowError):
    def __init__(self, kind: str, identifier: object):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class AuthorizationError(WorkflowError):
    """Actor lacks the rights for the requested operation."""
    pass


class AuthenticationError(WorkflowError):
    """No usable actor identity was supplied."""
    pass


class ConflictError(WorkflowError):
    """Request state no longer allows the transition (already decided, raced)."""

    def __init__(self, message: str, *, request_id: int | None = None, current_status: str | None = None):
        self.request_id = request_id
        self.current_status = current_status
        super().__init__(message)
