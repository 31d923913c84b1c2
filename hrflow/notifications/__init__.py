"""Outbound notifications about request state changes.

This package contains ONLY delivery adapters.

Rules:
- No request state changes here.
- No authorization here.
- Delivery is best-effort; callers never depend on it succeeding.
"""
from .base import NotificationDispatcher, NoopNotificationDispatcher
from .background import BackgroundNotificationDispatcher
from .http_dispatcher import HttpNotificationDispatcher
