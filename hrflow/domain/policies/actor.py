from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    HR_ADMIN = "hr_admin"
    BRANCH_MANAGER = "branch_manager"
    TEAM_LEAD = "team_lead"
    EMPLOYEE = "employee"
    LOGISTICS_MANAGER = "logistics_manager"
    DEPARTMENT_HEAD = "department_head"
    PROJECT_MANAGER = "project_manager"


class PermissionModule(str, Enum):
    EMPLOYEE_MANAGEMENT = "employee_management"
    CONTRACT_MANAGEMENT = "contract_management"
    ANNOUNCEMENTS = "announcements"
    LEAVE_MANAGEMENT = "leave_management"


class PermissionLevel(str, Enum):
    VIEW = "view"
    MANAGE = "manage"


def permission(module: PermissionModule, level: PermissionLevel) -> str:
    """Canonical 'module:level' form used in actor permission sets."""
    return f"{module.value}:{level.value}"


@dataclass(frozen=True)
class Actor:
    """Identity of whoever performs an operation, as asserted by the session layer.

    `direct_report_ids` lists the users this actor manages directly; it is
    the only organizational relationship the policy consults.
    """

    id: str
    role: Role
    permissions: frozenset[str] = field(default_factory=frozenset)
    direct_report_ids: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, value: str) -> bool:
        return value in self.permissions

    def manages(self, user_id: str) -> bool:
        return user_id in self.direct_report_ids
