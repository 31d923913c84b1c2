"""Type-specific payload schemas for requests.

Every request shares one envelope; what differs per type is the payload.
- Each request type maps to one Pydantic model.
- Unknown extra fields are kept, so callers may carry form-specific data.
- Validation happens once, at submission; after that the payload is opaque.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from hrflow.core.errors import ValidationError
from .enums import RequestType


class LeaveType(str, Enum):
    SICK_LEAVE = 'sick_leave'
    CASUAL_LEAVE = 'casual_leave'
    PUBLIC_HOLIDAY = 'public_holiday'
    BEREAVEMENT_LEAVE = 'bereavement_leave'
    UNPAID_LEAVE = 'unpaid_leave'


class PayloadBase(BaseModel):
    model_config = ConfigDict(extra='allow')


class TaskHelpPayload(PayloadBase):
    """Help or clarification on an assigned task."""

    attachment_name: str | None = None


class TaskExtensionPayload(PayloadBase):
    """Deadline extension for a task, in days."""

    extension_days: int = Field(ge=1)


class DepartmentTaskPayload(PayloadBase):
    """Task a department head asks HR to staff."""

    department: str = Field(min_length=1)
    estimated_hours: int | None = Field(default=None, ge=0)
    due_date: date | None = None


class HrTaskPayload(DepartmentTaskPayload):
    pass


class LogisticsItemPayload(PayloadBase):
    """Procurement of an item, new or already in inventory."""

    item_name: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    estimated_cost: float | None = Field(default=None, ge=0)
    category: str | None = None
    vendor: str | None = None


class LeavePayload(PayloadBase):
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int | None = Field(default=None, ge=1)
    covering_employee_id: str | None = None

    @model_validator(mode='after')
    def _check_range(self) -> 'LeavePayload':
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        if self.total_days is None:
            self.total_days = (self.end_date - self.start_date).days + 1
        return self


class DocumentApprovalPayload(PayloadBase):
    document_name: str = Field(min_length=1)


class RegistrationPayload(PayloadBase):
    """Account registration awaiting HR review."""

    email: EmailStr
    username: str = Field(min_length=1)
    requested_role: str = 'employee'
    requested_department: str | None = None


PAYLOAD_MODELS: dict[RequestType, type[PayloadBase]] = {
    RequestType.TASK_HELP: TaskHelpPayload,
    RequestType.TASK_EXTENSION: TaskExtensionPayload,
    RequestType.DEPARTMENT_TASK: DepartmentTaskPayload,
    RequestType.HR_TASK: HrTaskPayload,
    RequestType.LOGISTICS_ITEM: LogisticsItemPayload,
    RequestType.LEAVE: LeavePayload,
    RequestType.DOCUMENT_APPROVAL: DocumentApprovalPayload,
    RequestType.REGISTRATION: RegistrationPayload,
}

# Types whose request is meaningless without the resource it concerns
TARGET_REQUIRED = frozenset({
    RequestType.TASK_EXTENSION,
    RequestType.DOCUMENT_APPROVAL,
})


def validate_payload(request_type: RequestType, payload: dict[str, Any] | None) -> dict[str, Any]:
    """Validate a raw payload for the given request type.

    Args:
        request_type: RequestType enum.
        payload: Raw payload dict (None is treated as empty).

    Returns:
        The normalized payload as a JSON-compatible dict.

    Raises:
        ValidationError: If required fields are missing or malformed.
    """
    model = PAYLOAD_MODELS[request_type]
    try:
        validated = model.model_validate(payload or {})
    except PydanticValidationError as exc:
        problems = '; '.join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid payload for '{request_type.value}': {problems}") from exc

    # Declared fields left empty are dropped; extras are kept as sent, nulls included
    extras = validated.model_extra or {}
    return {
        key: value
        for key, value in validated.model_dump(mode='json').items()
        if value is not None or key in extras
    }
