"""Notification dispatcher abstraction.

In production, a dispatcher might be:
- an internal notification HTTP service
- an email relay
- a queue producer feeding a mailer
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from hrflow.domain.requests.enums import EventKind


class NotificationDispatcher(ABC):
    """Informs a recipient that something happened to a request."""

    @abstractmethod
    def notify(self, recipient_id: str, request_id: int, event_kind: EventKind) -> None:
        """Deliver one notification. May raise; callers treat failures as non-fatal."""
        raise NotImplementedError


class NoopNotificationDispatcher(NotificationDispatcher):
    def notify(self, recipient_id: str, request_id: int, event_kind: EventKind) -> None:
        return None
