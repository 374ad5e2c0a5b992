"""Shared inbound path: dedup check, then enqueue."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.config import settings
from leadengine.models.processing_queue import ProcessingQueueItem
from leadengine.schemas.payload import NormalizedPayload
from leadengine.services.deduplication import is_duplicate_lead
from leadengine.services.processing_queue import enqueue_lead

logger = logging.getLogger(__name__)


async def queue_unless_duplicate(
    db: AsyncSession,
    payload: NormalizedPayload,
) -> Optional[ProcessingQueueItem]:
    """Queue the payload, or return None when it repeats a recent message."""
    duplicate = await is_duplicate_lead(
        db,
        payload.source,
        payload.user_id,
        payload.message_content,
        within_hours=settings.DEDUPLICATION_HOURS,
        threshold=settings.DEDUPLICATION_THRESHOLD,
    )
    if duplicate:
        logger.info("[Dedup] Skipping duplicate message from %s user %s", payload.source.value, payload.user_id)
        return None
    return await enqueue_lead(db, payload)
