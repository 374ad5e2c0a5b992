"""Raw inbound webhook audit log."""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Enum, String, Text
from sqlalchemy.dialects.postgresql import UUID

from leadengine.core.database import Base, JSONType
from leadengine.models.lead import LeadSource, enum_values


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    source = Column(Enum(LeadSource, name="webhook_source", values_callable=enum_values), nullable=False)
    event_type = Column(String(100), nullable=True)
    raw_payload = Column(JSONType, nullable=False)
    processed = Column(Boolean, nullable=False, default=False, index=True)
    processing_error = Column(Text, nullable=True)
    lead_id = Column(UUID(as_uuid=True), nullable=True)
