"""Request lifecycle: submit -> pending -> decision -> (fulfilment) -> terminal.

This is the only place request state changes. It is responsible for:
- validating submissions (envelope + per-type payload)
- gating every transition through the authorization policy
- enforcing at-most-once decisions via the store's compare-and-set
- walking approved logistics/document requests through fulfilment in order
- emitting notifications after the state change is committed

State machine (advanceable types; simple types stop at approved/rejected):

    pending --approve--> approved --> purchased --> delivered --> completed
    pending --reject---> rejected
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Mapping, TypeVar

from hrflow.core.errors import (
    AuthorizationError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from hrflow.domain.policies import Actor, AuthorizationPolicy
from hrflow.notifications import NotificationDispatcher, NoopNotificationDispatcher
from hrflow.observability.tracing import Span, log_event, new_trace_id
from hrflow.targets import AcceptAllTargetResolver, TargetResolver

from .entities import DecisionUpdate, NewRequest, RequestEntity, RequestEvent, utc_now
from .enums import (
    ADVANCEABLE_TYPES,
    FULFILMENT_SEQUENCE,
    Decision,
    EventKind,
    RequestStatus,
    RequestType,
    Urgency,
)
from .payloads import TARGET_REQUIRED, validate_payload
from .repository import RequestRepositoryProtocol

E = TypeVar('E', bound=Enum)

# Types whose reviewers hear about new submissions
NOTIFY_ON_SUBMIT = frozenset({RequestType.LEAVE, RequestType.LOGISTICS_ITEM})


def _coerce(enum_cls: type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}'; expected one of: {allowed}") from None


class LifecycleEngine:
    """Coordinates validation, authorization, persistence, and notification."""

    def __init__(
        self,
        *,
        repository: RequestRepositoryProtocol,
        policy: AuthorizationPolicy,
        dispatcher: NotificationDispatcher | None = None,
        resolver: TargetResolver | None = None,
        clock: Callable[[], Any] = utc_now,
        description_min_length: int = 10,
        reviewer_inboxes: Mapping[str, str] | None = None,
    ) -> None:
        self._repo = repository
        self._policy = policy
        self._dispatcher = dispatcher or NoopNotificationDispatcher()
        self._resolver = resolver or AcceptAllTargetResolver()
        self._clock = clock
        self._description_min_length = description_min_length
        self._reviewer_inboxes = dict(reviewer_inboxes or {})

    # -------------------------
    # Submission
    # -------------------------

    def submit(
        self,
        requester_id: str,
        request_type: RequestType | str,
        *,
        title: str,
        description: str,
        payload: dict[str, Any] | None = None,
        urgency: Urgency | str = Urgency.MEDIUM,
        target_id: str | None = None,
    ) -> RequestEntity:
        """Create a new pending request.

        Raises:
            ValidationError: Unknown type/urgency, blank title, short description,
                bad payload, or a missing target for types that need one.
            NotFoundError: `target_id` does not resolve.
        """
        trace_id = new_trace_id()
        request_type = _coerce(RequestType, request_type, 'request type')
        urgency = _coerce(Urgency, urgency, 'urgency')

        if not requester_id or not requester_id.strip():
            raise ValidationError('requester id is required')

        title = (title or '').strip()
        if not title:
            raise ValidationError('title is required')

        description = (description or '').strip()
        if len(description) < self._description_min_length:
            raise ValidationError(
                f'description must be at least {self._description_min_length} characters'
            )

        clean_payload = validate_payload(request_type, payload)

        if target_id is None and request_type in TARGET_REQUIRED:
            raise ValidationError(f"'{request_type.value}' requests require a target id")
        if target_id is not None and not self._resolver.exists(request_type, target_id):
            raise NotFoundError('Target', target_id)

        created = self._repo.create(
            NewRequest(
                type=request_type,
                requester_id=requester_id,
                title=title,
                description=description,
                urgency=urgency,
                payload=clean_payload,
                target_id=target_id,
                created_at=self._clock(),
            )
        )
        log_event(
            'request.submitted',
            trace_id=trace_id,
            request_id=created.id,
            type=request_type.value,
            requester_id=requester_id,
            urgency=urgency.value,
        )

        if request_type in NOTIFY_ON_SUBMIT:
            inbox = self._reviewer_inboxes.get(request_type.value)
            if inbox:
                self._dispatch(inbox, created.id, EventKind.SUBMITTED, trace_id=trace_id)

        return created

    # -------------------------
    # Decision
    # -------------------------

    def decide(
        self,
        request_id: int,
        reviewer: Actor,
        decision: Decision | str,
        response_message: str | None = None,
    ) -> RequestEntity:
        """Approve or reject a pending request, at most once.

        Raises:
            NotFoundError: No such request.
            ConflictError: The request is no longer pending, including when a
                concurrent decision won the compare-and-set.
            ValidationError: Self-decision, unknown decision, or a rejection
                without a response message.
            AuthorizationError: The policy does not let the reviewer decide.
        """
        trace_id = new_trace_id()
        span = Span(name='request.decide', trace_id=trace_id, attributes={'request_id': request_id})

        try:
            request = self._load(request_id)

            if not request.is_pending:
                log_event(
                    'request.conflict',
                    level='warning',
                    trace_id=trace_id,
                    request_id=request_id,
                    status=request.status.value,
                )
                raise ConflictError(
                    'Request already decided',
                    request_id=request_id,
                    current_status=request.status.value,
                )

            if reviewer.id == request.requester_id:
                raise ValidationError('Requesters cannot decide their own requests')

            verdict = self._policy.evaluate_decide(reviewer, request)
            if not verdict.allowed:
                raise AuthorizationError(verdict.reason)

            decision = _coerce(Decision, decision, 'decision')
            message = (response_message or '').strip() or None
            if decision == Decision.REJECTED and message is None:
                raise ValidationError('A response message is required when rejecting a request')

            updated = self._repo.compare_and_set_decision(
                DecisionUpdate(
                    request_id=request_id,
                    status=RequestStatus(decision.value),
                    reviewer_id=reviewer.id,
                    response_message=message,
                    decided_at=self._clock(),
                )
            )
            if updated is None:
                current = self._repo.get(request_id)
                log_event(
                    'request.conflict',
                    level='warning',
                    trace_id=trace_id,
                    request_id=request_id,
                    status=current.status.value if current else None,
                )
                raise ConflictError(
                    'Request already decided',
                    request_id=request_id,
                    current_status=current.status.value if current else None,
                )
        except WorkflowError as exc:
            span.fail(exc)
            raise
        finally:
            span.end()
            log_event('span.end', trace_id=trace_id, span=span)

        log_event(
            'request.decided',
            trace_id=trace_id,
            request_id=request_id,
            status=updated.status.value,
            reviewer_id=reviewer.id,
        )
        self._dispatch(
            updated.requester_id,
            request_id,
            EventKind(decision.value),
            trace_id=trace_id,
        )
        return updated

    # -------------------------
    # Fulfilment
    # -------------------------

    def advance(
        self,
        request_id: int,
        actor: Actor,
        next_state: RequestStatus | str,
    ) -> RequestEntity:
        """Move an approved logistics/document request one fulfilment step forward.

        Raises:
            NotFoundError: No such request.
            IllegalTransitionError: Simple request type, unknown state, or a
                step that skips or reverses the fixed order.
            ConflictError: Request not approved yet, rejected, already
                completed, or moved concurrently.
            AuthorizationError: The actor may not perform this step.
        """
        trace_id = new_trace_id()
        span = Span(
            name='request.advance',
            trace_id=trace_id,
            attributes={'request_id': request_id, 'next_state': str(next_state)},
        )

        try:
            request = self._load(request_id)
            current = request.status

            try:
                target = RequestStatus(next_state)
            except ValueError:
                raise IllegalTransitionError(current.value, str(next_state)) from None

            if request.type not in ADVANCEABLE_TYPES:
                raise IllegalTransitionError(current.value, target.value)

            if current in (RequestStatus.PENDING, RequestStatus.REJECTED):
                raise ConflictError(
                    f"Request is '{current.value}' and cannot be fulfilled",
                    request_id=request_id,
                    current_status=current.value,
                )
            if current == RequestStatus.COMPLETED:
                raise ConflictError(
                    'Request already completed',
                    request_id=request_id,
                    current_status=current.value,
                )

            position = FULFILMENT_SEQUENCE.index(current)
            expected = FULFILMENT_SEQUENCE[position + 1]
            if target != expected:
                raise IllegalTransitionError(current.value, target.value)

            verdict = self._policy.evaluate_advance(actor, request, target)
            if not verdict.allowed:
                raise AuthorizationError(verdict.reason)

            updated = self._repo.compare_and_set_status(
                request_id,
                expected=current,
                new_status=target,
                actor_id=actor.id,
                at=self._clock(),
            )
            if updated is None:
                latest = self._repo.get(request_id)
                log_event(
                    'request.conflict',
                    level='warning',
                    trace_id=trace_id,
                    request_id=request_id,
                    status=latest.status.value if latest else None,
                )
                raise ConflictError(
                    'Request changed concurrently',
                    request_id=request_id,
                    current_status=latest.status.value if latest else None,
                )
        except WorkflowError as exc:
            span.fail(exc)
            raise
        finally:
            span.end()
            log_event('span.end', trace_id=trace_id, span=span)

        log_event(
            'request.advanced',
            trace_id=trace_id,
            request_id=request_id,
            from_status=current.value,
            to_status=target.value,
            actor_id=actor.id,
        )
        if actor.id != updated.requester_id:
            self._dispatch(updated.requester_id, request_id, EventKind.ADVANCED, trace_id=trace_id)
        return updated

    # -------------------------
    # Reads that need the same gatekeeping
    # -------------------------

    def get(self, request_id: int, actor: Actor) -> RequestEntity:
        request = self._load(request_id)
        if not self._policy.can_view(actor, request):
            raise AuthorizationError(f"Not allowed to view request '{request_id}'")
        return request

    def history(self, request_id: int, actor: Actor) -> list[RequestEvent]:
        self.get(request_id, actor)
        return self._repo.events(request_id)

    # -------------------------
    # Internals
    # -------------------------

    def _load(self, request_id: int) -> RequestEntity:
        request = self._repo.get(request_id)
        if request is None:
            raise NotFoundError('Request', request_id)
        return request

    def _dispatch(self, recipient_id: str, request_id: int, kind: EventKind, *, trace_id: str) -> None:
        # Runs after commit; a delivery failure must not undo the transition.
        # The service wires in a background dispatcher, so this only enqueues.
        try:
            self._dispatcher.notify(recipient_id, request_id, kind)
        except Exception as exc:  # noqa: BLE001
            log_event(
                'notification.failed',
                level='warning',
                trace_id=trace_id,
                request_id=request_id,
                recipient_id=recipient_id,
                event_kind=kind.value,
                error=f'{type(exc).__name__}: {exc}',
            )
            return

        log_event(
            'notification.dispatched',
            trace_id=trace_id,
            request_id=request_id,
            recipient_id=recipient_id,
            event_kind=kind.value,
        )
