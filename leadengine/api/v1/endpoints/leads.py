"""Read-only operator views over leads and failed integration syncs.

- GET /api/v1/leads → list leads (filters: source, qualified)
- GET /api/v1/leads/failed-syncs → integration failures awaiting attention
- GET /api/v1/leads/{id} → one lead
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.database import get_db
from leadengine.core.deps import verify_worker_secret
from leadengine.models.failed_sync import FailedSync, SyncIntegration
from leadengine.models.lead import Lead, LeadSource
from leadengine.schemas.lead import FailedSyncOut, LeadListOut, LeadOut

router = APIRouter(dependencies=[Depends(verify_worker_secret)])
logger = logging.getLogger(__name__)


@router.get("", response_model=LeadListOut)
async def list_leads(
    source: Optional[LeadSource] = Query(None),
    qualified: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    query = select(Lead)
    count_query = select(func.count(Lead.id))
    if source is not None:
        query = query.where(Lead.source == source)
        count_query = count_query.where(Lead.source == source)
    if qualified is not None:
        query = query.where(Lead.is_qualified == qualified)
        count_query = count_query.where(Lead.is_qualified == qualified)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.order_by(Lead.created_at.desc()).offset(offset).limit(limit))
    return LeadListOut(
        leads=[LeadOut.model_validate(lead) for lead in result.scalars().all()],
        total=total,
    )


@router.get("/failed-syncs", response_model=List[FailedSyncOut])
async def list_failed_syncs(
    integration: Optional[SyncIntegration] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    query = select(FailedSync).order_by(FailedSync.created_at.desc()).limit(limit)
    if integration is not None:
        query = query.where(FailedSync.integration == integration)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{lead_id}", response_model=LeadOut)
async def get_lead(lead_id: UUID, db: AsyncSession = Depends(get_db)):
    lead = await db.get(Lead, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead
