"""Meta (Facebook / Instagram) webhook: verification challenge and events."""

import json
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.config import settings
from leadengine.core.database import get_db
from leadengine.schemas.payload import NormalizedPayload
from leadengine.services.intake import queue_unless_duplicate
from leadengine.services.normalizers import normalize_meta_payload, verify_meta_signature

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/meta")
async def meta_verify(
    hub_mode: str = Query(None, alias="hub.mode"),
    hub_verify_token: str = Query(None, alias="hub.verify_token"),
    hub_challenge: str = Query(None, alias="hub.challenge"),
):
    """Answer Meta's subscription handshake."""
    if (
        hub_mode == "subscribe"
        and settings.META_VERIFY_TOKEN
        and hub_verify_token == settings.META_VERIFY_TOKEN
    ):
        logger.info("[Meta Webhook] Verification successful")
        return PlainTextResponse(hub_challenge or "")
    raise HTTPException(status_code=403, detail="Verification failed")


@router.post("/meta")
async def meta_webhook(request: Request, db: AsyncSession = Depends(get_db)):
    """Signed Messenger / Instagram / Page feed events."""
    raw_body = await request.body()
    signature = request.headers.get("x-hub-signature-256")
    if not verify_meta_signature(raw_body, signature, settings.META_APP_SECRET):
        logger.error("[Meta Webhook] Invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        body = json.loads(raw_body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    logger.info("[Meta Webhook] Received event: %s", body.get("object"))
    payloads = normalize_meta_payload(body)
    await _forward(db, payloads)
    return {"success": True}


async def _forward(db: AsyncSession, payloads: List[NormalizedPayload]) -> None:
    """Dedup and queue each message; one bad message never fails the delivery."""
    for payload in payloads:
        try:
            item = await queue_unless_duplicate(db, payload)
            if item is not None:
                logger.info("[Meta->Queue] Lead queued: %s", item.id)
        except Exception as e:
            logger.error("[Meta->Queue] Error for %s: %s", payload.user_id, e)
