"""
Request workflow enums.

Values are persisted as-is and appear verbatim in the HTTP API.
"""

from enum import Enum


class RequestType(str, Enum):
    TASK_HELP = "task_help"
    TASK_EXTENSION = "task_extension"
    DEPARTMENT_TASK = "department_task"
    HR_TASK = "hr_task"
    LOGISTICS_ITEM = "logistics_item"
    LEAVE = "leave"
    DOCUMENT_APPROVAL = "document_approval"
    REGISTRATION = "registration"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    # Post-approval fulfilment (logistics and document requests only)
    PURCHASED = "purchased"
    DELIVERED = "delivered"
    COMPLETED = "completed"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Decision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class EventKind(str, Enum):
    """Notification event kinds sent to the dispatcher."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    ADVANCED = "advanced"


# Higher rank sorts first in pending lists
URGENCY_RANK = {
    Urgency.URGENT: 3,
    Urgency.HIGH: 2,
    Urgency.MEDIUM: 1,
    Urgency.LOW: 0,
}

ADVANCEABLE_TYPES = frozenset({RequestType.LOGISTICS_ITEM, RequestType.DOCUMENT_APPROVAL})

# Fixed fulfilment order after approval
FULFILMENT_SEQUENCE = (
    RequestStatus.APPROVED,
    RequestStatus.PURCHASED,
    RequestStatus.DELIVERED,
    RequestStatus.COMPLETED,
)
