"""Queue worker trigger.

Call POST /process-queue periodically (cron, scheduler or
scripts/trigger_worker.py). Each call runs one tick over a fixed batch.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.database import get_db
from leadengine.core.deps import get_integrations, verify_worker_secret
from leadengine.models.processing_queue import ProcessingQueueItem, QueueStatus
from leadengine.schemas.queue import QueueItemOut, WorkerTickResult
from leadengine.services.lead_processor import Integrations, LeadProcessor
from leadengine.services.processing_queue import process_queue_batch

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/process-queue", response_model=WorkerTickResult, dependencies=[Depends(verify_worker_secret)])
async def process_queue(
    db: AsyncSession = Depends(get_db),
    integrations: Integrations = Depends(get_integrations),
):
    """Process one batch of eligible queue items."""
    processor = LeadProcessor(db, integrations)
    tick = await process_queue_batch(db, processor.process)
    if tick.processed or tick.failed:
        logger.info("[Worker] Tick done: %d processed, %d failed", tick.processed, tick.failed)
    return tick


@router.get("/process-queue")
async def process_queue_info():
    return {
        "status": "ok",
        "endpoint": "process-queue",
        "message": "Use POST to trigger queue processing",
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/queue", response_model=List[QueueItemOut], dependencies=[Depends(verify_worker_secret)])
async def list_queue(
    status: Optional[QueueStatus] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Operator view of queue items, newest first."""
    query = select(ProcessingQueueItem).order_by(ProcessingQueueItem.created_at.desc()).limit(limit)
    if status is not None:
        query = query.where(ProcessingQueueItem.status == status)
    result = await db.execute(query)
    return result.scalars().all()
