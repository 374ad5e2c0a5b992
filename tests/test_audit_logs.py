"""Tests for the lead audit trail and webhook event log."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import select

from leadengine.models.lead import LeadSource
from leadengine.models.lead_log import LeadAction, LeadLog
from leadengine.services.lead_log import log_lead_processing
from leadengine.services.webhook_events import mark_webhook_event, record_webhook_event


def _broken_session():
    session = MagicMock()
    session.commit = AsyncMock(side_effect=RuntimeError("database unavailable"))
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    return session


@pytest.mark.asyncio
async def test_log_lead_processing(db):
    lead_id = uuid4()
    await log_lead_processing(db, lead_id, LeadSource.TIKTOK, "tt-1", LeadAction.SYNCED, {"deal_id": "9"})

    [entry] = (await db.execute(select(LeadLog))).scalars().all()
    assert entry.lead_id == lead_id
    assert entry.action == LeadAction.SYNCED
    assert entry.details == {"deal_id": "9"}


@pytest.mark.asyncio
async def test_log_lead_processing_swallows_errors():
    session = _broken_session()
    await log_lead_processing(session, uuid4(), LeadSource.FACEBOOK, "U1", LeadAction.ERROR)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_and_mark_webhook_event(db):
    event = await record_webhook_event(db, LeadSource.FACEBOOK, "inbound_message", {"user_id": "U1"})
    assert event is not None
    assert event.processed is False

    lead_id = uuid4()
    await mark_webhook_event(db, event, error="Queued: 1", lead_id=lead_id)

    await db.refresh(event)
    assert event.processed is True
    assert event.processing_error == "Queued: 1"
    assert event.lead_id == lead_id


@pytest.mark.asyncio
async def test_record_webhook_event_fails_open():
    session = _broken_session()
    assert await record_webhook_event(session, LeadSource.FACEBOOK, "inbound_message", {}) is None


@pytest.mark.asyncio
async def test_mark_missing_event_is_noop():
    session = _broken_session()
    await mark_webhook_event(session, None, error="Duplicate message")
    session.commit.assert_not_called()
