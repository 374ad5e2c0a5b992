"""Lead model: the durable outcome of one processed inbound message."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Text, Index
from sqlalchemy.dialects.postgresql import UUID

from leadengine.core.database import Base, JSONType


class LeadSource(str, enum.Enum):
    """Inbound channel a message arrived on."""
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    LINKEDIN = "linkedin"
    WEB_FORM = "web_form"


class LeadUrgency(str, enum.Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Language(str, enum.Enum):
    ENGLISH = "en"
    ZULU = "zu"
    AFRIKAANS = "af"
    UNKNOWN = "unknown"


def enum_values(enum_cls) -> list[str]:
    """Persist enum values ("High") rather than member names ("HIGH")."""
    return [member.value for member in enum_cls]


class Lead(Base):
    __tablename__ = "leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Source
    source = Column(Enum(LeadSource, name="lead_source", values_callable=enum_values), nullable=False)
    source_user_id = Column(String(255), nullable=True)
    source_post_id = Column(String(255), nullable=True)

    # Contact
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    # Message
    message_content = Column(Text, nullable=False)
    original_language = Column(
        Enum(Language, name="lead_language", values_callable=enum_values),
        nullable=False,
        default=Language.UNKNOWN,
    )
    translated_content = Column(Text, nullable=True)

    # AI qualification
    is_qualified = Column(Boolean, nullable=False, default=False)
    urgency = Column(Enum(LeadUrgency, name="lead_urgency", values_callable=enum_values), nullable=True)
    intent_score = Column(Integer, nullable=False, default=0)
    ai_suggested_reply = Column(Text, nullable=True)
    ai_extracted_data = Column(JSONType, nullable=True)
    ai_reasoning = Column(Text, nullable=True)

    # HubSpot
    hubspot_contact_id = Column(String(64), nullable=True)
    hubspot_deal_id = Column(String(64), nullable=True)
    synced_to_hubspot = Column(Boolean, nullable=False, default=False)
    hubspot_sync_error = Column(Text, nullable=True)

    # WhatsApp
    whatsapp_notification_sent = Column(Boolean, nullable=False, default=False)
    whatsapp_notification_at = Column(DateTime, nullable=True)
    whatsapp_notification_error = Column(Text, nullable=True)

    # Auto-reply
    auto_reply_sent = Column(Boolean, nullable=False, default=False)
    auto_reply_sent_at = Column(DateTime, nullable=True)
    auto_reply_error = Column(Text, nullable=True)

    # "metadata" is reserved on declarative classes
    lead_metadata = Column("metadata", JSONType, nullable=True)

    __table_args__ = (
        Index("ix_leads_source_user_created", "source", "source_user_id", "created_at"),
    )
