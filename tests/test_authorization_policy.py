from __future__ import annotations

from datetime import datetime

import pytest

from hrflow.domain.policies import PolicyOutcome, build_default_policy
from hrflow.domain.requests.entities import RequestEntity
from hrflow.domain.requests.enums import RequestStatus, RequestType

from tests.fixtures.actors import (
    BRANCH_MANAGER,
    DEPARTMENT_HEAD,
    EMPLOYEE,
    HR_ADMIN,
    LEAVE_OFFICER,
    LEAVE_VIEWER,
    LOGISTICS_MANAGER,
    OTHER_EMPLOYEE,
    SUPERVISOR,
    TEAM_LEAD,
)


def _request(request_type: RequestType, **fields) -> RequestEntity:
    return RequestEntity(
        id=1,
        type=request_type,
        requester_id=fields.pop("requester_id", EMPLOYEE.id),
        title="Request",
        description="Long enough description",
        created_at=datetime(2024, 1, 1),
        **fields,
    )


policy = build_default_policy()


def test_requester_is_denied_even_with_an_eligible_role() -> None:
    request = _request(RequestType.LEAVE, requester_id=HR_ADMIN.id)

    verdict = policy.evaluate_decide(HR_ADMIN, request)

    assert verdict.outcome == PolicyOutcome.DENY
    assert "own" in verdict.reason


@pytest.mark.parametrize(
    "actor",
    [HR_ADMIN, BRANCH_MANAGER, LEAVE_OFFICER, SUPERVISOR],
)
def test_leave_reviewers(actor) -> None:
    assert policy.can_decide(actor, _request(RequestType.LEAVE))


@pytest.mark.parametrize(
    "actor",
    [OTHER_EMPLOYEE, LEAVE_VIEWER, LOGISTICS_MANAGER, TEAM_LEAD],
)
def test_leave_non_reviewers(actor) -> None:
    assert not policy.can_decide(actor, _request(RequestType.LEAVE))


def test_logistics_items_are_decided_by_procurement_roles() -> None:
    request = _request(RequestType.LOGISTICS_ITEM)

    assert policy.can_decide(LOGISTICS_MANAGER, request)
    assert policy.can_decide(HR_ADMIN, request)
    assert not policy.can_decide(BRANCH_MANAGER, request)
    assert not policy.can_decide(DEPARTMENT_HEAD, request)


def test_task_requests_go_to_leads_or_the_direct_manager() -> None:
    request = _request(RequestType.TASK_EXTENSION, target_id="task-1")

    assert policy.can_decide(TEAM_LEAD, request)
    assert policy.can_decide(SUPERVISOR, request)
    assert not policy.can_decide(OTHER_EMPLOYEE, request)


def test_supervisor_only_manages_their_own_reports() -> None:
    request = _request(RequestType.TASK_HELP, requester_id=OTHER_EMPLOYEE.id)

    assert not policy.can_decide(SUPERVISOR, request)


def test_department_and_hr_tasks_are_hr_only() -> None:
    for request_type in (RequestType.DEPARTMENT_TASK, RequestType.HR_TASK):
        request = _request(request_type)
        assert policy.can_decide(HR_ADMIN, request)
        assert not policy.can_decide(DEPARTMENT_HEAD, request)


def test_deny_reason_names_role_and_type() -> None:
    verdict = policy.evaluate_decide(OTHER_EMPLOYEE, _request(RequestType.REGISTRATION))

    assert not verdict.allowed
    assert "employee" in verdict.reason
    assert "registration" in verdict.reason


def test_completion_can_be_confirmed_by_the_requester() -> None:
    request = _request(RequestType.LOGISTICS_ITEM, status=RequestStatus.DELIVERED)

    assert policy.can_advance(EMPLOYEE, request, RequestStatus.COMPLETED)
    assert not policy.can_advance(EMPLOYEE, request, RequestStatus.PURCHASED)
    assert not policy.can_advance(OTHER_EMPLOYEE, request, RequestStatus.COMPLETED)
    assert policy.can_advance(LOGISTICS_MANAGER, request, RequestStatus.DELIVERED)


def test_visibility() -> None:
    leave = _request(RequestType.LEAVE)
    logistics = _request(RequestType.LOGISTICS_ITEM)

    # Requester, oversight, and eligible reviewers
    assert policy.can_view(EMPLOYEE, leave)
    assert policy.can_view(BRANCH_MANAGER, logistics)
    assert policy.can_view(LEAVE_OFFICER, leave)

    # Unrelated colleagues
    assert not policy.can_view(OTHER_EMPLOYEE, leave)
    assert not policy.can_view(LOGISTICS_MANAGER, leave)
    assert policy.can_view(LOGISTICS_MANAGER, logistics)


def test_recorded_reviewer_keeps_visibility() -> None:
    request = _request(
        RequestType.TASK_HELP,
        requester_id=OTHER_EMPLOYEE.id,
        status=RequestStatus.APPROVED,
        reviewer_id=SUPERVISOR.id,
    )

    assert policy.can_view(SUPERVISOR, request)
