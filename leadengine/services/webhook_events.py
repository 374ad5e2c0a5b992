"""Raw webhook audit log. Observability only; every call fails open."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.models.lead import LeadSource
from leadengine.models.webhook_event import WebhookEvent

logger = logging.getLogger(__name__)


async def record_webhook_event(
    db: AsyncSession,
    source: LeadSource,
    event_type: str,
    raw_payload: Dict[str, Any],
) -> Optional[WebhookEvent]:
    """Store the raw inbound payload. Returns None if the write fails."""
    try:
        event = WebhookEvent(
            source=source,
            event_type=event_type,
            raw_payload=raw_payload,
            processed=False,
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)
        return event
    except Exception as e:
        logger.error("Failed to log webhook event: %s", e)
        await db.rollback()
        return None


async def mark_webhook_event(
    db: AsyncSession,
    event: Optional[WebhookEvent],
    error: Optional[str] = None,
    lead_id: Optional[UUID] = None,
) -> None:
    """Flag an event as processed with an optional annotation."""
    if event is None:
        return
    event_id = event.id
    try:
        event.processed = True
        event.processing_error = error
        if lead_id:
            event.lead_id = lead_id
        await db.commit()
    except Exception as e:
        logger.error("Failed to mark webhook event %s: %s", event_id, e)
        await db.rollback()
