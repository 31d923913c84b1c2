from hrflow.domain.requests.enums import RequestStatus, RequestType
from .actor import PermissionLevel, PermissionModule, Role, permission
from .policy import AdvanceRule, AuthorizationPolicy, DecisionRule

_TASK_LEADS = frozenset({
    Role.TEAM_LEAD,
    Role.PROJECT_MANAGER,
    Role.DEPARTMENT_HEAD,
    Role.HR_ADMIN,
})

_PROCUREMENT = frozenset({Role.LOGISTICS_MANAGER, Role.HR_ADMIN})


def build_default_policy() -> AuthorizationPolicy:
    """Decision and fulfilment rights per request type."""
    return AuthorizationPolicy(
        decide_rules={
            RequestType.TASK_HELP: DecisionRule(roles=_TASK_LEADS, direct_manager=True),
            RequestType.TASK_EXTENSION: DecisionRule(roles=_TASK_LEADS, direct_manager=True),
            RequestType.DEPARTMENT_TASK: DecisionRule(roles=frozenset({Role.HR_ADMIN})),
            RequestType.HR_TASK: DecisionRule(roles=frozenset({Role.HR_ADMIN})),
            RequestType.LOGISTICS_ITEM: DecisionRule(roles=_PROCUREMENT),
            RequestType.LEAVE: DecisionRule(
                roles=frozenset({Role.BRANCH_MANAGER, Role.HR_ADMIN}),
                permissions=frozenset({
                    permission(PermissionModule.LEAVE_MANAGEMENT, PermissionLevel.MANAGE),
                }),
                direct_manager=True,
            ),
            RequestType.DOCUMENT_APPROVAL: DecisionRule(
                roles=frozenset({Role.HR_ADMIN, Role.DEPARTMENT_HEAD}),
                permissions=frozenset({
                    permission(PermissionModule.EMPLOYEE_MANAGEMENT, PermissionLevel.MANAGE),
                }),
            ),
            RequestType.REGISTRATION: DecisionRule(
                roles=frozenset({Role.HR_ADMIN, Role.BRANCH_MANAGER}),
            ),
        },
        advance_rules={
            RequestStatus.PURCHASED: AdvanceRule(roles=_PROCUREMENT),
            RequestStatus.DELIVERED: AdvanceRule(roles=_PROCUREMENT),
            # The requester may confirm receipt
            RequestStatus.COMPLETED: AdvanceRule(roles=_PROCUREMENT, requester=True),
        },
        oversight_roles=frozenset({Role.HR_ADMIN, Role.BRANCH_MANAGER}),
    )
