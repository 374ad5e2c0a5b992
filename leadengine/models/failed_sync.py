"""Audit ledger of best-effort integrations that failed for a lead."""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID

from leadengine.core.database import Base
from leadengine.models.lead import enum_values


class SyncIntegration(str, enum.Enum):
    HUBSPOT = "hubspot"
    WHATSAPP = "whatsapp"


class FailedSync(Base):
    __tablename__ = "failed_syncs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id"), nullable=False, index=True)
    integration = Column(
        Enum(SyncIntegration, name="sync_integration", values_callable=enum_values),
        nullable=False,
        index=True,
    )
    error_message = Column(Text, nullable=True)
    next_retry_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
