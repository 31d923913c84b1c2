# ============================================================
# Business/domain entities
# ============================================================
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .enums import RequestStatus, RequestType, Urgency


def utc_now() -> datetime:
    """Naive UTC timestamp, the form every store persists."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class RequestEntity:
    id: int | None
    type: RequestType
    requester_id: str
    title: str
    description: str
    urgency: Urgency = Urgency.MEDIUM
    payload: dict[str, Any] = field(default_factory=dict)
    status: RequestStatus = RequestStatus.PENDING
    target_id: str | None = None
    response_message: str | None = None
    reviewer_id: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass(frozen=True)
class RequestEvent:
    """One row of a request's audit trail."""

    id: int | None
    request_id: int
    from_status: RequestStatus | None
    to_status: RequestStatus
    actor_id: str
    message: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class NewRequest:
    """Validated submission, ready to be persisted."""

    type: RequestType
    requester_id: str
    title: str
    description: str
    urgency: Urgency
    payload: dict[str, Any]
    target_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class DecisionUpdate:
    request_id: int
    status: RequestStatus
    reviewer_id: str
    response_message: str | None
    decided_at: datetime


@dataclass(frozen=True)
class RequestFilters:
    type: Optional[RequestType] = None
    status: Optional[RequestStatus] = None
    requester_id: Optional[str] = None
    target_id: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class PageMeta:
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool


@dataclass(frozen=True)
class PageResult:
    data: list[RequestEntity]
    meta: PageMeta
