"""Read-only projections over the request store.

Every listing passes through `AuthorizationPolicy.can_view`, so what a
dashboard shows is exactly what the engine would let the actor act on.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace

from hrflow.domain.policies import Actor, AuthorizationPolicy

from .entities import PageMeta, PageResult, Pagination, RequestEntity, RequestFilters
from .enums import URGENCY_RANK, RequestStatus, RequestType
from .repository import RequestRepositoryProtocol


def pending_order_key(request: RequestEntity) -> tuple:
    """Most urgent first, then oldest first; id keeps ties deterministic."""
    return (-URGENCY_RANK[request.urgency], request.created_at, request.id)


def history_order_key(request: RequestEntity) -> tuple:
    return (request.created_at, request.id)


class RequestQueryService:
    def __init__(self, *, repository: RequestRepositoryProtocol, policy: AuthorizationPolicy) -> None:
        self._repo = repository
        self._policy = policy

    def _visible(self, actor: Actor, requests: list[RequestEntity]) -> list[RequestEntity]:
        return [r for r in requests if self._policy.can_view(actor, r)]

    def list_pending(self, actor: Actor, filters: RequestFilters | None = None) -> list[RequestEntity]:
        """Pending requests the actor can see, in review order."""
        filters = replace(filters or RequestFilters(), status=RequestStatus.PENDING)
        visible = self._visible(actor, self._repo.find(filters))
        return sorted(visible, key=pending_order_key)

    def list_for_requester(self, requester_id: str, actor: Actor | None = None) -> list[RequestEntity]:
        """Everything a requester submitted, newest first.

        With an actor, rows that actor may not view are dropped.
        """
        requests = self._repo.find(RequestFilters(requester_id=requester_id))
        if actor is not None:
            requests = self._visible(actor, requests)
        return sorted(requests, key=history_order_key, reverse=True)

    def count_pending_by_type(self, actor: Actor) -> dict[RequestType, int]:
        """Dashboard badge counts, computed from a single read of the store."""
        visible = self._visible(actor, self._repo.find(RequestFilters(status=RequestStatus.PENDING)))
        counts = Counter(r.type for r in visible)
        return {t: counts.get(t, 0) for t in RequestType}

    def list_requests(
            self,
            actor: Actor,
            filters: RequestFilters,
            paging: Pagination,
    ) -> PageResult:
        """
        Retrieve requests matching the given filters that the actor may view.

        All filters are optional.
        Pagination is always applied, after visibility filtering.
        """
        visible = self._visible(actor, self._repo.find(filters))
        ordered = sorted(visible, key=history_order_key, reverse=True)
        total = len(ordered)

        return PageResult(
            data=ordered[paging.offset:paging.offset + paging.limit],
            meta=PageMeta(
                total=total,
                limit=paging.limit,
                offset=paging.offset,
                has_next=(paging.offset + paging.limit) < total,
                has_previous=paging.offset > 0,
            ),
        )
