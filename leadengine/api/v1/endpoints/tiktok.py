"""TikTok comment webhook."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.database import get_db
from leadengine.services.intake import queue_unless_duplicate
from leadengine.services.normalizers import normalize_tiktok_payload

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/tiktok")
async def tiktok_webhook(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    logger.info("[TikTok Webhook] Received event: %s", body.get("event"))

    for payload in normalize_tiktok_payload(body):
        try:
            item = await queue_unless_duplicate(db, payload)
            if item is not None:
                logger.info("[TikTok->Queue] Lead queued: %s", item.id)
        except Exception as e:
            logger.error("[TikTok->Queue] Error for %s: %s", payload.user_id, e)

    return {"success": True}


@router.get("/tiktok")
async def tiktok_health():
    return {
        "status": "ok",
        "endpoint": "tiktok-webhook",
        "timestamp": datetime.utcnow().isoformat(),
    }
