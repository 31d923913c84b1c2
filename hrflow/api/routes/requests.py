from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from hrflow.api.core.container import Container, get_container
from hrflow.api.identity import assert_same_actor, get_actor
from hrflow.api.schemas import (
    AdvanceIn,
    CreateRequestIn,
    DecisionIn,
    RequestEventOut,
    RequestOut,
)
from hrflow.db.connection import get_db
from hrflow.domain.policies import Actor
from hrflow.domain.requests.entities import Pagination, RequestFilters
from hrflow.domain.requests.enums import RequestStatus, RequestType
from hrflow.domain.requests.lifecycle import LifecycleEngine
from hrflow.domain.requests.queries import RequestQueryService

router = APIRouter(prefix="/requests", tags=["Requests"])


def get_lifecycle(
    db: Session = Depends(get_db),
    container: Container = Depends(get_container),
) -> LifecycleEngine:
    return container.lifecycle(db)


def get_queries(
    db: Session = Depends(get_db),
    container: Container = Depends(get_container),
) -> RequestQueryService:
    return container.queries(db)


@router.post(
    "",
    status_code=201,
    summary="Submit a request",
    response_model=RequestOut,
)
def submit_request(
    body: CreateRequestIn,
    actor: Actor = Depends(get_actor),
    lifecycle: LifecycleEngine = Depends(get_lifecycle),
):
    assert_same_actor(actor, body.requester_id, "requesterId")
    created = lifecycle.submit(
        body.requester_id,
        body.type,
        title=body.title,
        description=body.description,
        payload=body.payload,
        urgency=body.urgency,
        target_id=body.target_id,
    )
    return RequestOut.model_validate(created)


@router.get(
    "",
    summary="List requests",
    description="Returns requests the caller may view, filtered by requester, target, type, and status. "
                "The total before paging is sent in the X-Total-Count header.",
    response_model=list[RequestOut],
)
def list_requests(
    response: Response,
    requester_id: Optional[str] = Query(default=None, alias="requesterId"),
    target_id: Optional[str] = Query(default=None, alias="targetId"),
    type_: Optional[RequestType] = Query(default=None, alias="type"),
    status: Optional[RequestStatus] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: Actor = Depends(get_actor),
    queries: RequestQueryService = Depends(get_queries),
    container: Container = Depends(get_container),
):
    """
    List requests with optional filters.

    Query Parameters:
    - requesterId: Filter by submitter
    - targetId: Filter by the resource the request concerns
    - type: Filter by request type
    - status: Filter by status
    - limit: Page size (default: HRFLOW_DEFAULT_PAGE_SIZE)
    - offset: Pagination offset (default: 0)
    """
    filters = RequestFilters(
        type=type_,
        status=status,
        requester_id=requester_id,
        target_id=target_id,
    )
    paging = Pagination(limit=limit or container.settings.default_page_size, offset=offset)
    page = queries.list_requests(actor, filters, paging)

    response.headers["X-Total-Count"] = str(page.meta.total)
    return [RequestOut.model_validate(r) for r in page.data]


@router.get(
    "/pending",
    summary="Pending requests awaiting review",
    description="Most urgent first, then oldest first.",
    response_model=list[RequestOut],
)
def list_pending(
    type_: Optional[RequestType] = Query(default=None, alias="type"),
    actor: Actor = Depends(get_actor),
    queries: RequestQueryService = Depends(get_queries),
):
    pending = queries.list_pending(actor, RequestFilters(type=type_))
    return [RequestOut.model_validate(r) for r in pending]


@router.get(
    "/pending/counts",
    summary="Pending request counts per type",
    response_model=dict[RequestType, int],
)
def count_pending(
    actor: Actor = Depends(get_actor),
    queries: RequestQueryService = Depends(get_queries),
):
    return queries.count_pending_by_type(actor)


@router.get("/{request_id}", response_model=RequestOut)
def get_request(
    request_id: int,
    actor: Actor = Depends(get_actor),
    lifecycle: LifecycleEngine = Depends(get_lifecycle),
):
    """Get a specific request, e.g. to re-render after a 409."""
    return RequestOut.model_validate(lifecycle.get(request_id, actor))


@router.get("/{request_id}/events", response_model=list[RequestEventOut])
def get_request_events(
    request_id: int,
    actor: Actor = Depends(get_actor),
    lifecycle: LifecycleEngine = Depends(get_lifecycle),
):
    """Audit trail of a request, oldest first."""
    return [RequestEventOut.model_validate(e) for e in lifecycle.history(request_id, actor)]


@router.put(
    "/{request_id}",
    summary="Approve or reject a pending request",
    response_model=RequestOut,
)
def decide_request(
    request_id: int,
    body: DecisionIn,
    actor: Actor = Depends(get_actor),
    lifecycle: LifecycleEngine = Depends(get_lifecycle),
):
    assert_same_actor(actor, body.reviewer_id, "reviewerId")
    updated = lifecycle.decide(
        request_id,
        actor,
        body.status,
        response_message=body.response_message,
    )
    return RequestOut.model_validate(updated)


@router.put(
    "/{request_id}/advance",
    summary="Move an approved logistics/document request to its next fulfilment state",
    response_model=RequestOut,
)
def advance_request(
    request_id: int,
    body: AdvanceIn,
    actor: Actor = Depends(get_actor),
    lifecycle: LifecycleEngine = Depends(get_lifecycle),
):
    assert_same_actor(actor, body.actor_id, "actorId")
    updated = lifecycle.advance(request_id, actor, body.next_state)
    return RequestOut.model_validate(updated)
