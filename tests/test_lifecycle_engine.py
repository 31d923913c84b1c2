from __future__ import annotations

import pytest

from hrflow.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from hrflow.domain.requests.enums import Decision, EventKind, RequestStatus, RequestType, Urgency
from hrflow.targets import InMemoryTargetResolver

from tests.fixtures.actors import (
    EMPLOYEE,
    HR_ADMIN,
    LEAVE_OFFICER,
    LOGISTICS_MANAGER,
    OTHER_EMPLOYEE,
)
from tests.fixtures.engine_factory import (
    LEAVE_PAYLOAD,
    LOGISTICS_PAYLOAD,
    VALID_DESCRIPTION,
    build_engine,
)
from tests.fixtures.recording_dispatcher import failing_dispatcher


def _submit_leave(engine, requester=EMPLOYEE, **overrides):
    fields = {
        "title": "Family trip",
        "description": VALID_DESCRIPTION,
        "payload": LEAVE_PAYLOAD,
    }
    fields.update(overrides)
    return engine.submit(requester.id, RequestType.LEAVE, **fields)


# -------------------------
# Submission
# -------------------------

def test_submit_creates_pending_request() -> None:
    engine, _, _ = build_engine()

    created = _submit_leave(engine, urgency="high")

    assert created.id is not None
    assert created.status == RequestStatus.PENDING
    assert created.urgency == Urgency.HIGH
    assert created.reviewer_id is None
    assert created.decided_at is None
    assert created.payload["total_days"] == 3


def test_submit_rejects_short_description() -> None:
    engine, queries, _ = build_engine()

    with pytest.raises(ValidationError) as exc:
        _submit_leave(engine, description="too short")

    assert "at least 10 characters" in str(exc.value)
    assert queries.list_for_requester(EMPLOYEE.id) == []


def test_submit_counts_description_length_after_trimming() -> None:
    engine, _, _ = build_engine()

    with pytest.raises(ValidationError):
        _submit_leave(engine, description="   short    ")


def test_submit_rejects_blank_title_and_unknown_type() -> None:
    engine, _, _ = build_engine()

    with pytest.raises(ValidationError):
        _submit_leave(engine, title="   ")

    with pytest.raises(ValidationError) as exc:
        engine.submit(EMPLOYEE.id, "overtime", title="Overtime", description=VALID_DESCRIPTION)
    assert "overtime" in str(exc.value)


def test_submit_rejects_unknown_urgency() -> None:
    engine, _, _ = build_engine()

    with pytest.raises(ValidationError):
        _submit_leave(engine, urgency="critical")


def test_submit_requires_target_for_extensions() -> None:
    engine, _, _ = build_engine()

    with pytest.raises(ValidationError) as exc:
        engine.submit(
            EMPLOYEE.id,
            RequestType.TASK_EXTENSION,
            title="More time",
            description=VALID_DESCRIPTION,
            payload={"extension_days": 3},
        )

    assert "target" in str(exc.value)


def test_submit_rejects_unknown_target() -> None:
    engine, _, _ = build_engine(resolver=InMemoryTargetResolver({"task-1"}))

    with pytest.raises(NotFoundError):
        engine.submit(
            EMPLOYEE.id,
            RequestType.TASK_EXTENSION,
            title="More time",
            description=VALID_DESCRIPTION,
            payload={"extension_days": 3},
            target_id="task-404",
        )

    created = engine.submit(
        EMPLOYEE.id,
        RequestType.TASK_EXTENSION,
        title="More time",
        description=VALID_DESCRIPTION,
        payload={"extension_days": 3},
        target_id="task-1",
    )
    assert created.target_id == "task-1"


def test_submit_notifies_reviewer_inbox_for_leave_and_logistics() -> None:
    engine, _, dispatcher = build_engine()

    leave = _submit_leave(engine)
    item = engine.submit(
        EMPLOYEE.id,
        RequestType.LOGISTICS_ITEM,
        title="New chair",
        description=VALID_DESCRIPTION,
        payload=LOGISTICS_PAYLOAD,
    )
    engine.submit(EMPLOYEE.id, RequestType.TASK_HELP, title="Help", description=VALID_DESCRIPTION)

    assert dispatcher.sent == [
        ("hr", leave.id, EventKind.SUBMITTED),
        ("logistics", item.id, EventKind.SUBMITTED),
    ]


# -------------------------
# Decision
# -------------------------

def test_approve_sets_reviewer_and_timestamp_together() -> None:
    engine, _, dispatcher = build_engine()
    request = _submit_leave(engine)

    decided = engine.decide(request.id, HR_ADMIN, Decision.APPROVED)

    assert decided.status == RequestStatus.APPROVED
    assert decided.reviewer_id == HR_ADMIN.id
    assert decided.decided_at is not None
    assert decided.decided_at > decided.created_at
    assert dispatcher.sent[-1] == (EMPLOYEE.id, request.id, EventKind.APPROVED)


def test_reject_requires_response_message() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)

    with pytest.raises(ValidationError):
        engine.decide(request.id, HR_ADMIN, "rejected", response_message="   ")

    # Nothing changed
    assert engine.get(request.id, HR_ADMIN).status == RequestStatus.PENDING

    rejected = engine.decide(request.id, HR_ADMIN, "rejected", response_message="Peak season")
    assert rejected.status == RequestStatus.REJECTED
    assert rejected.response_message == "Peak season"


def test_self_decision_is_rejected_as_invalid() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine, requester=HR_ADMIN)

    with pytest.raises(ValidationError):
        engine.decide(request.id, HR_ADMIN, Decision.APPROVED)


def test_ineligible_reviewer_is_unauthorized() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)

    with pytest.raises(AuthorizationError):
        engine.decide(request.id, LOGISTICS_MANAGER, Decision.APPROVED)


def test_permission_holder_may_decide_leave() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)

    decided = engine.decide(request.id, LEAVE_OFFICER, Decision.APPROVED)

    assert decided.reviewer_id == LEAVE_OFFICER.id


def test_second_decision_conflicts_and_reports_current_status() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)
    engine.decide(request.id, HR_ADMIN, Decision.APPROVED)

    with pytest.raises(ConflictError) as exc:
        engine.decide(request.id, LEAVE_OFFICER, Decision.REJECTED, response_message="No")

    assert exc.value.current_status == "approved"
    assert engine.get(request.id, HR_ADMIN).reviewer_id == HR_ADMIN.id


def test_decide_unknown_request_is_not_found() -> None:
    engine, _, _ = build_engine()

    with pytest.raises(NotFoundError):
        engine.decide(999, HR_ADMIN, Decision.APPROVED)


def test_notification_failure_does_not_undo_the_decision() -> None:
    dispatcher = failing_dispatcher()
    engine, _, _ = build_engine(dispatcher=dispatcher)
    request = _submit_leave(engine)

    decided = engine.decide(request.id, HR_ADMIN, Decision.APPROVED)

    assert decided.status == RequestStatus.APPROVED
    # Submission and decision were both attempted
    assert dispatcher.notify.call_count == 2
    dispatcher.notify.assert_called_with(EMPLOYEE.id, request.id, EventKind.APPROVED)
    assert engine.get(request.id, HR_ADMIN).status == RequestStatus.APPROVED


# -------------------------
# Reads
# -------------------------

def test_get_checks_visibility() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)

    assert engine.get(request.id, EMPLOYEE).id == request.id
    with pytest.raises(AuthorizationError):
        engine.get(request.id, OTHER_EMPLOYEE)


def test_history_records_every_transition() -> None:
    engine, _, _ = build_engine()
    request = _submit_leave(engine)
    engine.decide(request.id, HR_ADMIN, Decision.REJECTED, response_message="Overlaps audit")

    events = engine.history(request.id, EMPLOYEE)

    assert [(e.from_status, e.to_status) for e in events] == [
        (None, RequestStatus.PENDING),
        (RequestStatus.PENDING, RequestStatus.REJECTED),
    ]
    assert events[0].actor_id == EMPLOYEE.id
    assert events[1].actor_id == HR_ADMIN.id
    assert events[1].message == "Overlaps audit"
