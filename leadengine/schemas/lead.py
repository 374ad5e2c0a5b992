"""Pydantic schemas for leads and pipeline results."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel

from leadengine.models.failed_sync import SyncIntegration
from leadengine.models.lead import Language, LeadSource, LeadUrgency


class ProcessResult(BaseModel):
    """What the lead processor returns for one payload."""
    success: bool
    lead_id: UUID
    qualified: bool
    urgency: LeadUrgency
    score: int


class LeadOut(BaseModel):
    id: UUID
    created_at: datetime
    updated_at: datetime
    source: LeadSource
    source_user_id: Optional[str] = None
    source_post_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    message_content: str
    original_language: Language
    is_qualified: bool
    urgency: Optional[LeadUrgency] = None
    intent_score: int
    ai_suggested_reply: Optional[str] = None
    ai_extracted_data: Optional[Dict[str, Any]] = None
    ai_reasoning: Optional[str] = None
    hubspot_contact_id: Optional[str] = None
    hubspot_deal_id: Optional[str] = None
    synced_to_hubspot: bool
    hubspot_sync_error: Optional[str] = None
    whatsapp_notification_sent: bool
    whatsapp_notification_at: Optional[datetime] = None
    whatsapp_notification_error: Optional[str] = None
    auto_reply_sent: bool
    auto_reply_sent_at: Optional[datetime] = None
    auto_reply_error: Optional[str] = None

    class Config:
        from_attributes = True


class LeadListOut(BaseModel):
    leads: List[LeadOut]
    total: int


class FailedSyncOut(BaseModel):
    id: UUID
    lead_id: UUID
    integration: SyncIntegration
    error_message: Optional[str] = None
    next_retry_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
