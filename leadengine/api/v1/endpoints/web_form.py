"""Website contact form intake."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.database import get_db
from leadengine.models.lead import LeadSource
from leadengine.schemas.payload import WebFormSubmission
from leadengine.services.intake import queue_unless_duplicate
from leadengine.services.normalizers import normalize_web_form
from leadengine.services.webhook_events import mark_webhook_event, record_webhook_event

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/web-form")
async def web_form(submission: WebFormSubmission, db: AsyncSession = Depends(get_db)):
    """Queue a contact form submission like any other inbound message."""
    payload = normalize_web_form(submission)
    logger.info("[Web Form] Submission from %s", payload.user_id)

    event = await record_webhook_event(
        db, LeadSource.WEB_FORM, "form_submission", submission.model_dump(mode="json"),
    )

    item = await queue_unless_duplicate(db, payload)
    if item is None:
        await mark_webhook_event(db, event, error="Duplicate message")
        return {"success": True, "message": "Duplicate message skipped", "duplicate": True}

    queue_id = item.id
    await mark_webhook_event(db, event, error=f"Queued: {queue_id}")
    return {"success": True, "queued": True, "queue_id": str(queue_id)}
