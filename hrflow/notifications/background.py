"""Deliver notifications on worker threads, off the request path."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor

from hrflow.domain.requests.enums import EventKind
from hrflow.observability.tracing import log_event, new_trace_id
from .base import NotificationDispatcher


class BackgroundNotificationDispatcher(NotificationDispatcher):
    """Hands every notification to a thread pool and returns at once.

    With a single worker, notifications reach the inner dispatcher in the
    order they were emitted. Delivery failures are logged and dropped.
    """

    def __init__(self, inner: NotificationDispatcher, max_workers: int = 1) -> None:
        self._inner = inner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='hrflow-notify',
        )

    def notify(self, recipient_id: str, request_id: int, event_kind: EventKind) -> Future:
        return self._executor.submit(self._deliver, recipient_id, request_id, event_kind)

    def _deliver(self, recipient_id: str, request_id: int, event_kind: EventKind) -> None:
        trace_id = new_trace_id()
        try:
            self._inner.notify(recipient_id, request_id, event_kind)
        except Exception as exc:  # noqa: BLE001
            log_event(
                'notification.failed',
                level='warning',
                trace_id=trace_id,
                request_id=request_id,
                recipient_id=recipient_id,
                event_kind=event_kind.value,
                error=f'{type(exc).__name__}: {exc}',
            )
            return

        log_event(
            'notification.delivered',
            trace_id=trace_id,
            request_id=request_id,
            recipient_id=recipient_id,
            event_kind=event_kind.value,
        )

    def close(self, wait: bool = True) -> None:
        """Stop accepting work; with `wait`, drain what is already queued."""
        self._executor.shutdown(wait=wait)
