"""Near-duplicate detection for inbound messages.

A message is a duplicate when its token set overlaps strongly with a
recent message from the same source/user. Recent history covers both
persisted leads and queue items that have not been processed yet, so a
resend arriving before the worker runs is still caught.

Every lookup here fails open: a duplicate lead is cheaper than a
dropped one.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.models.lead import Lead, LeadSource
from leadengine.models.processing_queue import ProcessingQueueItem, QueueStatus
from leadengine.models.webhook_event import WebhookEvent

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_HOURS = 2
SIMILARITY_THRESHOLD = 0.85
HISTORY_LIMIT = 5

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_message(message: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    text = _NON_WORD.sub("", (message or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def calculate_similarity(first: str, second: str) -> float:
    """Jaccard similarity over the sets of whitespace-separated tokens.

    Two empty token sets score 0.0 so blank messages never match.
    """
    tokens_a = set(first.split())
    tokens_b = set(second.split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def is_similar(message: str, history: Iterable[str], threshold: float = SIMILARITY_THRESHOLD) -> bool:
    """True when any historical message is strictly above the threshold."""
    candidate = normalize_message(message)
    for previous in history:
        if calculate_similarity(candidate, normalize_message(previous)) > threshold:
            return True
    return False


async def _recent_messages(
    db: AsyncSession,
    source: LeadSource,
    source_user_id: str,
    cutoff: datetime,
) -> list[str]:
    leads = await db.execute(
        select(Lead.message_content)
        .where(
            Lead.source == source,
            Lead.source_user_id == source_user_id,
            Lead.created_at >= cutoff,
        )
        .order_by(Lead.created_at.desc())
        .limit(HISTORY_LIMIT)
    )
    queued = await db.execute(
        select(ProcessingQueueItem.payload)
        .where(
            ProcessingQueueItem.source == source,
            ProcessingQueueItem.source_user_id == source_user_id,
            ProcessingQueueItem.status.in_([QueueStatus.PENDING, QueueStatus.PROCESSING]),
            ProcessingQueueItem.created_at >= cutoff,
        )
        .order_by(ProcessingQueueItem.created_at.desc())
        .limit(HISTORY_LIMIT)
    )
    messages = [content for content in leads.scalars().all() if content]
    messages.extend(
        payload.get("message_content", "")
        for payload in queued.scalars().all()
        if payload
    )
    return messages


async def is_duplicate_lead(
    db: AsyncSession,
    source: LeadSource,
    source_user_id: str,
    message_content: str,
    within_hours: int = DEFAULT_WINDOW_HOURS,
    threshold: float = SIMILARITY_THRESHOLD,
) -> bool:
    """Check whether a near-identical message from this user arrived recently."""
    try:
        cutoff = datetime.utcnow() - timedelta(hours=within_hours)
        history = await _recent_messages(db, source, source_user_id, cutoff)
        if not history:
            return False

        if is_similar(message_content, history, threshold):
            logger.info("[Dedup] Found similar message from %s user %s", source.value, source_user_id)
            return True
        return False
    except Exception as e:
        logger.error("Deduplication check error: %s", e)
        return False


async def is_processed_webhook_event(db: AsyncSession, source: LeadSource, event_id) -> bool:
    """Check whether a webhook event was already processed (webhook redelivery guard)."""
    try:
        result = await db.execute(
            select(WebhookEvent.id)
            .where(
                WebhookEvent.source == source,
                WebhookEvent.id == event_id,
                WebhookEvent.processed.is_(True),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
    except Exception as e:
        logger.error("Webhook deduplication check error: %s", e)
        return False


async def get_recent_lead_count(
    db: AsyncSession,
    source: LeadSource,
    source_user_id: str,
    within_hours: int = 24,
) -> int:
    """Number of leads from this user in the window, for spam throttling."""
    try:
        cutoff = datetime.utcnow() - timedelta(hours=within_hours)
        result = await db.execute(
            select(func.count(Lead.id)).where(
                Lead.source == source,
                Lead.source_user_id == source_user_id,
                Lead.created_at >= cutoff,
            )
        )
        return result.scalar_one() or 0
    except Exception as e:
        logger.error("Recent lead count error: %s", e)
        return 0
