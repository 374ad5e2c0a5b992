"""Pydantic schemas for the processing queue and worker ticks."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel

from leadengine.models.processing_queue import QueueStatus


class QueueItemOut(BaseModel):
    id: UUID
    status: QueueStatus
    payload: Dict[str, Any]
    retry_count: int
    max_retries: int
    next_retry_at: Optional[datetime] = None
    error_message: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkerTickResult(BaseModel):
    success: bool = True
    processed: int = 0
    failed: int = 0
    errors: List[str] = []
