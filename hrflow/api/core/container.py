# --------------------------------
# DI container
# --------------------------------
from fastapi import Request
from sqlalchemy.orm import Session

from hrflow.config import Settings
from hrflow.domain.policies import AuthorizationPolicy, build_default_policy
from hrflow.domain.requests.lifecycle import LifecycleEngine
from hrflow.domain.requests.queries import RequestQueryService
from hrflow.domain.requests.repository import SqlRequestRepository
from hrflow.notifications import (
    BackgroundNotificationDispatcher,
    HttpNotificationDispatcher,
    NoopNotificationDispatcher,
    NotificationDispatcher,
)
from hrflow.targets import AcceptAllTargetResolver, HttpTargetResolver, TargetResolver


class Container:
    """Long-lived collaborators; per-request objects are built from a DB session."""

    def __init__(
        self,
        settings: Settings,
        *,
        policy: AuthorizationPolicy | None = None,
        dispatcher: NotificationDispatcher | None = None,
        resolver: TargetResolver | None = None,
    ):
        self._settings = settings
        self._policy = policy or build_default_policy()

        if dispatcher is None:
            dispatcher = (
                HttpNotificationDispatcher(
                    base_url=settings.notification_base_url,
                    timeout=settings.notification_timeout_seconds,
                )
                if settings.notification_base_url
                else NoopNotificationDispatcher()
            )
        # Responses never wait on the notification service
        self._dispatcher = BackgroundNotificationDispatcher(
            dispatcher,
            max_workers=settings.notification_workers,
        )

        if resolver is None:
            resolver = (
                HttpTargetResolver(base_url=settings.target_resolver_url)
                if settings.target_resolver_url
                else AcceptAllTargetResolver()
            )
        self._resolver = resolver

    @property
    def settings(self) -> Settings:
        return self._settings

    def lifecycle(self, db: Session) -> LifecycleEngine:
        return LifecycleEngine(
            repository=SqlRequestRepository(db),
            policy=self._policy,
            dispatcher=self._dispatcher,
            resolver=self._resolver,
            description_min_length=self._settings.description_min_length,
            reviewer_inboxes=self._settings.reviewer_inboxes,
        )

    def queries(self, db: Session) -> RequestQueryService:
        return RequestQueryService(
            repository=SqlRequestRepository(db),
            policy=self._policy,
        )

    def close(self) -> None:
        """Flush queued notifications. Called once, at shutdown."""
        self._dispatcher.close(wait=True)


def get_container(request: Request) -> Container:
    return request.app.state.container
