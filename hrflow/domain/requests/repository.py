# ============================================================
# DB access layer
# ============================================================
import copy
import json
import threading
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .entities import (
    DecisionUpdate,
    NewRequest,
    RequestEntity,
    RequestEvent,
    RequestFilters,
)
from .enums import RequestStatus, RequestType, Urgency
from .models import RequestEventRecord, RequestRecord


class RequestRepositoryProtocol(Protocol):
    def create(self, new: NewRequest) -> RequestEntity:
        """Persist a new pending request together with its submission event"""
        ...

    def get(self, request_id: int) -> RequestEntity | None:
        """Get a request by id"""
        ...

    def compare_and_set_decision(self, decision: DecisionUpdate) -> RequestEntity | None:
        """Record a decision only if the request is still pending.

        Returns None when no row was updated.
        """
        ...

    def compare_and_set_status(
            self,
            request_id: int,
            expected: RequestStatus,
            new_status: RequestStatus,
            actor_id: str,
            at: datetime,
    ) -> RequestEntity | None:
        """Move a request from `expected` to `new_status`; None if it was not in `expected`"""
        ...

    def find(self, filters: RequestFilters) -> list[RequestEntity]:
        """Get all requests matching the filters, in no particular order"""
        ...

    def events(self, request_id: int) -> list[RequestEvent]:
        """Audit trail of a request, oldest first"""
        ...


def _load_json(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _to_entity(record: RequestRecord) -> RequestEntity:
    return RequestEntity(
        id=record.id,
        type=RequestType(record.type),
        requester_id=record.requester_id,
        target_id=record.target_id,
        title=record.title,
        description=record.description,
        urgency=Urgency(record.urgency),
        payload=_load_json(record.payload),
        status=RequestStatus(record.status),
        response_message=record.response_message,
        reviewer_id=record.reviewer_id,
        created_at=record.created_at,
        decided_at=record.decided_at,
        updated_at=record.updated_at,
    )


def _to_event(record: RequestEventRecord) -> RequestEvent:
    return RequestEvent(
        id=record.id,
        request_id=record.request_id,
        from_status=RequestStatus(record.from_status) if record.from_status else None,
        to_status=RequestStatus(record.to_status),
        actor_id=record.actor_id,
        message=record.message,
        occurred_at=record.occurred_at,
    )


class SqlRequestRepository(RequestRepositoryProtocol):
    def __init__(self, db: Session):
        self.db = db

    def create(self, new: NewRequest) -> RequestEntity:
        record = RequestRecord(
            type=new.type.value,
            requester_id=new.requester_id,
            target_id=new.target_id,
            title=new.title,
            description=new.description,
            urgency=new.urgency.value,
            payload=new.payload,
            status=RequestStatus.PENDING.value,
            created_at=new.created_at,
        )
        self.db.add(record)
        self.db.flush()

        self.db.add(RequestEventRecord(
            request_id=record.id,
            from_status=None,
            to_status=RequestStatus.PENDING.value,
            actor_id=new.requester_id,
            occurred_at=new.created_at,
        ))
        entity = _to_entity(record)
        self.db.commit()
        return entity

    def get(self, request_id: int) -> RequestEntity | None:
        query = (
            select(RequestRecord)
            .where(RequestRecord.id == request_id)
            .execution_options(populate_existing=True)
        )
        record = self.db.scalars(query).one_or_none()
        return _to_entity(record) if record is not None else None

    def compare_and_set_decision(self, decision: DecisionUpdate) -> RequestEntity | None:
        # Conditional update: the status predicate makes the pending -> decided
        # transition happen at most once, whatever the number of callers.
        query = (
            update(RequestRecord)
            .where(
                RequestRecord.id == decision.request_id,
                RequestRecord.status == RequestStatus.PENDING.value,
            )
            .values(
                status=decision.status.value,
                reviewer_id=decision.reviewer_id,
                response_message=decision.response_message,
                decided_at=decision.decided_at,
                updated_at=decision.decided_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(query)
        if result.rowcount == 0:
            self.db.rollback()
            return None

        self.db.add(RequestEventRecord(
            request_id=decision.request_id,
            from_status=RequestStatus.PENDING.value,
            to_status=decision.status.value,
            actor_id=decision.reviewer_id,
            message=decision.response_message,
            occurred_at=decision.decided_at,
        ))
        self.db.commit()
        return self.get(decision.request_id)

    def compare_and_set_status(
            self,
            request_id: int,
            expected: RequestStatus,
            new_status: RequestStatus,
            actor_id: str,
            at: datetime,
    ) -> RequestEntity | None:
        query = (
            update(RequestRecord)
            .where(
                RequestRecord.id == request_id,
                RequestRecord.status == expected.value,
            )
            .values(status=new_status.value, updated_at=at)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(query)
        if result.rowcount == 0:
            self.db.rollback()
            return None

        self.db.add(RequestEventRecord(
            request_id=request_id,
            from_status=expected.value,
            to_status=new_status.value,
            actor_id=actor_id,
            occurred_at=at,
        ))
        self.db.commit()
        return self.get(request_id)

    def find(self, filters: RequestFilters) -> list[RequestEntity]:
        query = select(RequestRecord)

        # --- Filters ---
        if filters.type:
            query = query.where(RequestRecord.type == filters.type.value)

        if filters.status:
            query = query.where(RequestRecord.status == filters.status.value)

        if filters.requester_id:
            query = query.where(RequestRecord.requester_id == filters.requester_id)

        if filters.target_id:
            query = query.where(RequestRecord.target_id == filters.target_id)

        return [_to_entity(r) for r in self.db.scalars(query)]

    def events(self, request_id: int) -> list[RequestEvent]:
        query = (
            select(RequestEventRecord)
            .where(RequestEventRecord.request_id == request_id)
            .order_by(RequestEventRecord.id)
        )
        return [_to_event(r) for r in self.db.scalars(query)]


class InMemoryRequestRepository(RequestRepositoryProtocol):
    """Process-local store with the same compare-and-set semantics as the SQL one."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: dict[int, RequestEntity] = {}
        self._events: list[RequestEvent] = []
        self._next_id = 1
        self._next_event_id = 1

    def _append_event(self, **fields: Any) -> None:
        self._events.append(RequestEvent(id=self._next_event_id, **fields))
        self._next_event_id += 1

    def create(self, new: NewRequest) -> RequestEntity:
        with self._lock:
            entity = RequestEntity(
                id=self._next_id,
                type=new.type,
                requester_id=new.requester_id,
                target_id=new.target_id,
                title=new.title,
                description=new.description,
                urgency=new.urgency,
                payload=copy.deepcopy(new.payload),
                status=RequestStatus.PENDING,
                created_at=new.created_at,
            )
            self._requests[entity.id] = entity
            self._next_id += 1
            self._append_event(
                request_id=entity.id,
                from_status=None,
                to_status=RequestStatus.PENDING,
                actor_id=new.requester_id,
                occurred_at=new.created_at,
            )
            return copy.deepcopy(entity)

    def get(self, request_id: int) -> RequestEntity | None:
        with self._lock:
            entity = self._requests.get(request_id)
            return copy.deepcopy(entity) if entity is not None else None

    def compare_and_set_decision(self, decision: DecisionUpdate) -> RequestEntity | None:
        with self._lock:
            entity = self._requests.get(decision.request_id)
            if entity is None or entity.status != RequestStatus.PENDING:
                return None

            entity.status = decision.status
            entity.reviewer_id = decision.reviewer_id
            entity.response_message = decision.response_message
            entity.decided_at = decision.decided_at
            entity.updated_at = decision.decided_at
            self._append_event(
                request_id=entity.id,
                from_status=RequestStatus.PENDING,
                to_status=decision.status,
                actor_id=decision.reviewer_id,
                message=decision.response_message,
                occurred_at=decision.decided_at,
            )
            return copy.deepcopy(entity)

    def compare_and_set_status(
            self,
            request_id: int,
            expected: RequestStatus,
            new_status: RequestStatus,
            actor_id: str,
            at: datetime,
    ) -> RequestEntity | None:
        with self._lock:
            entity = self._requests.get(request_id)
            if entity is None or entity.status != expected:
                return None

            entity.status = new_status
            entity.updated_at = at
            self._append_event(
                request_id=entity.id,
                from_status=expected,
                to_status=new_status,
                actor_id=actor_id,
                occurred_at=at,
            )
            return copy.deepcopy(entity)

    def find(self, filters: RequestFilters) -> list[RequestEntity]:
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._requests.values()
                if (filters.type is None or r.type == filters.type)
                and (filters.status is None or r.status == filters.status)
                and (filters.requester_id is None or r.requester_id == filters.requester_id)
                and (filters.target_id is None or r.target_id == filters.target_id)
            ]

    def events(self, request_id: int) -> list[RequestEvent]:
        with self._lock:
            return [e for e in self._events if e.request_id == request_id]
