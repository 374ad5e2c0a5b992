"""Durable lead processing queue.

States: pending -> processing -> completed | pending (retry) | failed

A worker tick selects up to QUEUE_BATCH_SIZE eligible pending items, oldest
first. Each item is claimed with a conditional update (status must still be
pending) right before processing, so two overlapping ticks never process the
same item. There is no lease timeout: an item left in ``processing`` by a
crash stays there until an operator reconciles it.

Failed attempts are retried after ``base * 2 ** retry_count`` minutes
(10, 20, 40 with the default base of 5) until max_retries is reached.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.config import settings
from leadengine.core.exceptions import QueueError
from leadengine.models.processing_queue import ProcessingQueueItem, QueueStatus
from leadengine.schemas.payload import NormalizedPayload
from leadengine.schemas.queue import WorkerTickResult

logger = logging.getLogger(__name__)

ProcessFunc = Callable[[NormalizedPayload], Awaitable[Any]]


def retry_delay_minutes(retry_count: int, base_minutes: Optional[int] = None) -> int:
    """Backoff before the next attempt, given the already-incremented retry count."""
    base = settings.QUEUE_RETRY_BASE_MINUTES if base_minutes is None else base_minutes
    return base * 2 ** retry_count


async def enqueue_lead(
    db: AsyncSession,
    payload: NormalizedPayload,
    max_retries: Optional[int] = None,
) -> ProcessingQueueItem:
    """Store a payload for asynchronous processing."""
    item = ProcessingQueueItem(
        source=payload.source,
        source_user_id=payload.user_id,
        payload=payload.to_queue_payload(),
        status=QueueStatus.PENDING,
        retry_count=0,
        max_retries=settings.MAX_PROCESSING_RETRIES if max_retries is None else max_retries,
    )
    try:
        db.add(item)
        await db.commit()
        await db.refresh(item)
    except Exception as e:
        logger.error("[Queue] Failed to queue lead: %s", e)
        await db.rollback()
        raise QueueError("Failed to queue lead for processing") from e

    logger.info("[Queue] Lead queued with ID: %s", item.id)
    return item


async def get_eligible_items(db: AsyncSession, limit: Optional[int] = None) -> list[ProcessingQueueItem]:
    """Pending items whose backoff has elapsed and retries remain, oldest first."""
    now = datetime.utcnow()
    query = (
        select(ProcessingQueueItem)
        .where(
            ProcessingQueueItem.status == QueueStatus.PENDING,
            or_(
                ProcessingQueueItem.next_retry_at.is_(None),
                ProcessingQueueItem.next_retry_at <= now,
            ),
            ProcessingQueueItem.retry_count < ProcessingQueueItem.max_retries,
        )
        .order_by(ProcessingQueueItem.created_at.asc())
        .limit(limit or settings.QUEUE_BATCH_SIZE)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def claim_item(db: AsyncSession, item_id: UUID) -> bool:
    """Atomically move an item from pending to processing.

    The update re-checks eligibility, so an item that another worker has
    processed or rescheduled since it was selected is left alone.
    Returns False when the claim did not take.
    """
    now = datetime.utcnow()
    result = await db.execute(
        update(ProcessingQueueItem)
        .where(
            ProcessingQueueItem.id == item_id,
            ProcessingQueueItem.status == QueueStatus.PENDING,
            or_(
                ProcessingQueueItem.next_retry_at.is_(None),
                ProcessingQueueItem.next_retry_at <= now,
            ),
            ProcessingQueueItem.retry_count < ProcessingQueueItem.max_retries,
        )
        .values(status=QueueStatus.PROCESSING, started_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def mark_completed(db: AsyncSession, item_id: UUID, result: Dict[str, Any]) -> None:
    await db.execute(
        update(ProcessingQueueItem)
        .where(ProcessingQueueItem.id == item_id)
        .values(
            status=QueueStatus.COMPLETED,
            completed_at=datetime.utcnow(),
            result=result,
            error_message=None,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()


async def mark_attempt_failed(
    db: AsyncSession,
    item_id: UUID,
    retry_count: int,
    max_retries: int,
    error: str,
) -> QueueStatus:
    """Record a failed attempt: schedule a retry or fail terminally.

    Args:
        db: Database session
        item_id: Queue item id
        retry_count: retry_count before this attempt
        max_retries: the item's retry ceiling
        error: Error message from the failed attempt

    Returns:
        The item's new status (pending or failed)
    """
    new_retry_count = retry_count + 1
    now = datetime.utcnow()

    if new_retry_count >= max_retries:
        values = dict(
            status=QueueStatus.FAILED,
            error_message=error,
            retry_count=new_retry_count,
            completed_at=now,
        )
        logger.error(
            "[Worker] Item %s failed permanently after %d attempts: %s",
            item_id, new_retry_count, error[:200],
        )
    else:
        delay = retry_delay_minutes(new_retry_count)
        values = dict(
            status=QueueStatus.PENDING,
            error_message=error,
            retry_count=new_retry_count,
            next_retry_at=now + timedelta(minutes=delay),
        )
        logger.warning(
            "[Worker] Item %s failed (attempt %d/%d), retry in %d min: %s",
            item_id, new_retry_count, max_retries, delay, error[:200],
        )

    await db.execute(
        update(ProcessingQueueItem)
        .where(ProcessingQueueItem.id == item_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return values["status"]


async def process_queue_batch(
    db: AsyncSession,
    processor_func: ProcessFunc,
    batch_size: Optional[int] = None,
) -> WorkerTickResult:
    """One worker tick over a fixed-size batch.

    Args:
        db: Database session
        processor_func: Async function that processes a NormalizedPayload and
                        returns a result model/dict, raising on failure.
        batch_size: Max items for this tick (defaults to QUEUE_BATCH_SIZE)
    """
    items = await get_eligible_items(db, batch_size)
    tick = WorkerTickResult()

    if not items:
        return tick

    logger.info("[Worker] Processing %d queued items", len(items))

    # Plain values only: a rollback below expires the ORM objects
    batch = [(item.id, item.payload, item.retry_count, item.max_retries) for item in items]

    for item_id, raw_payload, retry_count, max_retries in batch:
        if not await claim_item(db, item_id):
            logger.info("[Worker] Item %s already claimed or no longer eligible", item_id)
            continue

        try:
            payload = NormalizedPayload.model_validate(raw_payload)
            result = await processor_func(payload)
            if hasattr(result, "model_dump"):
                result = result.model_dump(mode="json")
        except Exception as e:
            await db.rollback()
            error_message = str(e) or e.__class__.__name__
            tick.failed += 1
            tick.errors.append(f"Item {item_id}: {error_message}")
            await mark_attempt_failed(db, item_id, retry_count, max_retries, error_message)
            continue

        # The lead and its side effects already exist, so a failed status
        # write must not reschedule the item. It stays in processing.
        try:
            await mark_completed(db, item_id, result)
        except Exception as e:
            await db.rollback()
            logger.error(
                "[Worker] Item %s processed but could not be marked completed: %s",
                item_id,
                e,
            )
        tick.processed += 1
        logger.info("[Worker] Processed queue item %s", item_id)

    return tick
