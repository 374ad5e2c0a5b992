import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.dialects.postgresql import UUID

from leadengine.core.database import Base, JSONType
from leadengine.models.lead import LeadSource, enum_values


class LeadAction(str, enum.Enum):
    RECEIVED = "received"
    PROCESSED = "processed"
    QUALIFIED = "qualified"
    REJECTED = "rejected"
    SYNCED = "synced"
    ERROR = "error"


class LeadLog(Base):
    __tablename__ = "lead_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    lead_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    source = Column(Enum(LeadSource, name="lead_log_source", values_callable=enum_values), nullable=False)
    source_user_id = Column(String(255), nullable=True)
    action = Column(Enum(LeadAction, name="lead_action", values_callable=enum_values), nullable=False)
    details = Column(JSONType, nullable=True)
