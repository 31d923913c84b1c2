from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hrflow.domain.requests.enums import Decision, RequestStatus, RequestType, Urgency


class CamelModel(BaseModel):
    """Wire models use camelCase; Python code keeps snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CreateRequestIn(CamelModel):
    type: RequestType
    requester_id: str = Field(min_length=1, description="Submitting user")
    target_id: Optional[str] = Field(
        default=None,
        description="Task, document, or employee the request concerns"
    )
    title: str
    description: str = Field(description="At least 10 characters")
    urgency: Urgency = Urgency.MEDIUM
    payload: dict[str, Any] = Field(default_factory=dict)


class DecisionIn(CamelModel):
    status: Decision
    response_message: Optional[str] = Field(
        default=None,
        description="Required when rejecting"
    )
    reviewer_id: str = Field(min_length=1)


class AdvanceIn(CamelModel):
    # Kept as a plain string: ordering errors are reported by the engine (422)
    next_state: str = Field(min_length=1)
    actor_id: str = Field(min_length=1)


class RequestOut(CamelModel):
    id: int
    type: RequestType
    requester_id: str
    target_id: Optional[str] = None
    title: str
    description: str
    urgency: Urgency
    payload: dict[str, Any]
    status: RequestStatus
    response_message: Optional[str] = None
    reviewer_id: Optional[str] = None
    created_at: datetime
    decided_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RequestEventOut(CamelModel):
    id: int
    request_id: int
    from_status: Optional[RequestStatus] = None
    to_status: RequestStatus
    actor_id: str
    message: Optional[str] = None
    occurred_at: datetime
