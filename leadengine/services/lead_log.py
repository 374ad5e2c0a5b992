"""Fire-and-forget lead processing audit trail."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.models.lead import LeadSource
from leadengine.models.lead_log import LeadAction, LeadLog

logger = logging.getLogger(__name__)


async def log_lead_processing(
    db: AsyncSession,
    lead_id: UUID,
    source: LeadSource,
    source_user_id: Optional[str],
    action: LeadAction,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record a pipeline action against a lead.

    Args:
        db: Database session
        lead_id: Lead the action belongs to
        source: Inbound channel of the lead
        source_user_id: Platform user id on that channel
        action: What happened (processed, synced, rejected, ...)
        details: Optional JSON context
    """
    try:
        db.add(LeadLog(
            lead_id=lead_id,
            source=source,
            source_user_id=source_user_id,
            action=action,
            details=details or {},
        ))
        await db.commit()
    except Exception as e:
        logger.error("Lead logging error: %s", e)
        # Never raise: audit logging must not break the pipeline
        await db.rollback()
