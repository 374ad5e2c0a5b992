"""Pydantic schemas for inbound payloads."""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, EmailStr, Field

from leadengine.models.lead import LeadSource


class PayloadMetadata(BaseModel):
    """Channel context carried alongside a message."""
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    user_name: Optional[str] = None
    user_handle: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    platform_data: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"
        frozen = True


class NormalizedPayload(BaseModel):
    """The single shape every channel is translated into before dedup/queue."""
    source: LeadSource
    user_id: str = Field(min_length=1)
    message_content: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    metadata: Optional[PayloadMetadata] = None

    class Config:
        frozen = True

    def to_queue_payload(self) -> Dict[str, Any]:
        """JSON-safe dict stored on the queue row."""
        return self.model_dump(mode="json", exclude_none=True)


class WebFormSubmission(BaseModel):
    """Website contact form submission."""
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    message: str = Field(min_length=1)
    source_page: Optional[str] = None
    utm_params: Optional[Dict[str, str]] = None


class LinkedInSearchRequest(BaseModel):
    job_title: str = Field(min_length=1)
    location: str = Field(min_length=1)
    limit: int = Field(default=10, ge=1, le=100)
