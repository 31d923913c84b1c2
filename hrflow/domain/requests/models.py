from sqlalchemy import (
    Column, String, DateTime, JSON, Text, Integer, ForeignKey,
)
from sqlalchemy.orm import declarative_base

from .entities import utc_now

Base = declarative_base()


class RequestRecord(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(32), nullable=False, index=True)
    requester_id = Column(String, nullable=False, index=True)
    target_id = Column(String, nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    urgency = Column(String(16), nullable=False, default="medium")
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(16), nullable=False, default="pending", index=True)
    response_message = Column(Text, nullable=True)
    reviewer_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    decided_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)


class RequestEventRecord(Base):
    """Append-only audit trail of status changes."""

    __tablename__ = "request_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(Integer, ForeignKey("requests.id"), nullable=False, index=True)
    from_status = Column(String(16), nullable=True)
    to_status = Column(String(16), nullable=False)
    actor_id = Column(String, nullable=False)
    message = Column(Text, nullable=True)
    occurred_at = Column(DateTime, nullable=False, default=utc_now)
