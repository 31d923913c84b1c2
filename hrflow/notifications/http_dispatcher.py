"""HTTP notification dispatcher that calls the notification service."""

from __future__ import annotations

import httpx

from hrflow.domain.requests.enums import EventKind
from .base import NotificationDispatcher


class HttpNotificationDispatcher(NotificationDispatcher):
    """Deliver notifications by POSTing to an HTTP service.

    The service owns templates and channels (email, in-app); this side only
    says who should hear about which request and why.
    """

    def __init__(
            self,
            base_url: str,
            client: httpx.Client | None = None,
            timeout: float = 5.0,
    ) -> None:
        """Create an HTTP notification dispatcher.

        Args:
            base_url: Base URL of the notification service (e.g. http://notify-svc:8002).
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-call timeout in seconds.
        """
        self._base_url = base_url.rstrip('/')
        self._client = client
        self._timeout = timeout

    def notify(self, recipient_id: str, request_id: int, event_kind: EventKind) -> None:
        url = f'{self._base_url}/notifications'
        body = {
            'recipient_id': recipient_id,
            'request_id': request_id,
            'event_kind': event_kind.value,
        }

        if self._client is not None:
            resp = self._client.post(url, json=body, timeout=self._timeout)
            resp.raise_for_status()
            return

        with httpx.Client() as client:
            resp = client.post(url, json=body, timeout=self._timeout)
            resp.raise_for_status()
