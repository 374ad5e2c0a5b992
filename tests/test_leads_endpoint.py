"""Tests for the read-only lead and failed-sync views."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from leadengine.models.lead import LeadSource
from leadengine.schemas.payload import NormalizedPayload
from leadengine.services.lead_processor import LeadProcessor


async def _process(db, integrations, user_id="U1", source=LeadSource.FACEBOOK):
    payload = NormalizedPayload(source=source, user_id=user_id, message_content="Need a quote for paving")
    return await LeadProcessor(db, integrations).process(payload)


@pytest.mark.asyncio
async def test_list_and_get_leads(client, db, integrations, auth_headers):
    first = await _process(db, integrations, user_id="U1")
    await _process(db, integrations, user_id="T1", source=LeadSource.TIKTOK)

    resp = await client.get("/api/v1/leads", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == 2

    filtered = await client.get("/api/v1/leads", params={"source": "tiktok"}, headers=auth_headers)
    assert filtered.json()["total"] == 1
    assert filtered.json()["leads"][0]["source_user_id"] == "T1"

    detail = await client.get(f"/api/v1/leads/{first.lead_id}", headers=auth_headers)
    assert detail.status_code == 200
    assert detail.json()["urgency"] == "High"
    assert detail.json()["hubspot_contact_id"] == "501"


@pytest.mark.asyncio
async def test_get_lead_not_found(client, auth_headers):
    resp = await client.get(f"/api/v1/leads/{uuid4()}", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_failed_syncs_view(client, db, integrations, auth_headers):
    integrations.hubspot.sync_lead = AsyncMock(side_effect=RuntimeError("HubSpot down"))
    result = await _process(db, integrations)

    resp = await client.get("/api/v1/leads/failed-syncs", headers=auth_headers)

    assert resp.status_code == 200
    [failed] = resp.json()
    assert failed["integration"] == "hubspot"
    assert failed["lead_id"] == str(result.lead_id)
    assert failed["error_message"] == "HubSpot down"


@pytest.mark.asyncio
async def test_leads_require_secret(client, worker_secret):
    resp = await client.get("/api/v1/leads")
    assert resp.status_code == 401
