"""This module handles request submission, decisions, fulfilment, and listings."""
