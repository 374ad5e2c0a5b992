"""Durable processing queue model."""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from leadengine.core.database import Base, JSONType
from leadengine.models.lead import LeadSource, enum_values


class QueueStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingQueueItem(Base):
    __tablename__ = "processing_queue"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Denormalized from payload so dedup can see queued-but-unprocessed messages
    source = Column(Enum(LeadSource, name="queue_source", values_callable=enum_values), nullable=False)
    source_user_id = Column(String(255), nullable=False)
    payload = Column(JSONType, nullable=False)
    status = Column(
        Enum(QueueStatus, name="queue_status", values_callable=enum_values),
        nullable=False,
        default=QueueStatus.PENDING,
        index=True,
    )
    retry_count = Column(Integer, nullable=False, default=0)
    max_retries = Column(Integer, nullable=False, default=3)
    next_retry_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)
    result = Column(JSONType, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_processing_queue_status_next_retry", "status", "next_retry_at"),
        Index("ix_processing_queue_source_user", "source", "source_user_id"),
    )
