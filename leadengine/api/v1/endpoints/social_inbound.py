"""Unified inbound webhook.

Accepts an already-normalized payload, records it, checks for duplicates
and queues it. Heavy work (AI, CRM, notifications) happens in the worker,
so this answers immediately.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.database import get_db
from leadengine.schemas.payload import NormalizedPayload
from leadengine.services.intake import queue_unless_duplicate
from leadengine.services.webhook_events import mark_webhook_event, record_webhook_event

router = APIRouter()
logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing required fields: source, user_id, message_content"


def _parse_payload(body) -> NormalizedPayload:
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail=MISSING_FIELDS)
    if not body.get("source") or not body.get("user_id") or not body.get("message_content"):
        raise HTTPException(status_code=400, detail=MISSING_FIELDS)
    try:
        return NormalizedPayload.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid payload: {e.errors()[0]['msg']}")


@router.post("/social-inbound")
async def social_inbound(request: Request, db: AsyncSession = Depends(get_db)):
    """Receive a NormalizedPayload and queue it for processing."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")

    payload = _parse_payload(body)
    logger.info("[Webhook] Received %s message from user %s", payload.source.value, payload.user_id)

    event = await record_webhook_event(db, payload.source, "inbound_message", body)

    item = await queue_unless_duplicate(db, payload)
    if item is None:
        await mark_webhook_event(db, event, error="Duplicate message")
        return {
            "success": True,
            "message": "Duplicate message skipped",
            "duplicate": True,
        }

    queue_id = item.id
    await mark_webhook_event(db, event, error=f"Queued: {queue_id}")

    return {
        "success": True,
        "queued": True,
        "queue_id": str(queue_id),
        "message": "Lead queued for processing",
    }


@router.get("/social-inbound")
async def social_inbound_health():
    return {
        "status": "ok",
        "endpoint": "social-inbound",
        "timestamp": datetime.utcnow().isoformat(),
    }
