"""Tests for the HubSpot CRM connector."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from leadengine.models.lead import Lead, LeadSource, LeadUrgency
from leadengine.services.hubspot import HubSpotClient, build_contact_properties, build_note_body


def _lead(**overrides):
    values = dict(
        source=LeadSource.FACEBOOK,
        source_user_id="U1",
        message_content="I need an urgent plumber today!",
        contact_name="Thabo Nkosi",
        contact_email="thabo@nkosi.co.za",
        urgency=LeadUrgency.HIGH,
        intent_score=92,
        ai_suggested_reply="We can come today.",
    )
    values.update(overrides)
    return Lead(**values)


def _response(method, path, status_code=200, body=None):
    return httpx.Response(
        status_code,
        json=body if body is not None else {},
        request=httpx.Request(method, f"https://api.hubapi.com{path}"),
    )


def test_contact_properties():
    props = build_contact_properties(_lead())
    assert props["firstname"] == "Thabo"
    assert props["lastname"] == "Nkosi"
    assert props["email"] == "thabo@nkosi.co.za"
    assert props["lead_source"] == "facebook"
    assert props["lead_source_platform_id"] == "U1"


def test_note_body_mentions_score_and_reply():
    body = build_note_body(_lead())
    assert "Urgency: High" in body
    assert "Intent Score: 92/100" in body
    assert "We can come today." in body


@pytest.mark.asyncio
async def test_missing_token_is_reported():
    result = await HubSpotClient(access_token="").sync_lead(_lead())
    assert result.success is False
    assert "not configured" in result.error


@pytest.mark.asyncio
async def test_creates_contact_deal_and_note():
    responses = [
        _response("POST", "/crm/v3/objects/contacts/search", body={"results": []}),
        _response("POST", "/crm/v3/objects/contacts", 201, {"id": "501"}),
        _response("POST", "/crm/v3/objects/deals", 201, {"id": "901"}),
        _response("POST", "/crm/v3/objects/notes", 201, {"id": "77"}),
    ]
    with patch.object(httpx.AsyncClient, "request", new=AsyncMock(side_effect=responses)) as request:
        result = await HubSpotClient(access_token="pat-test").sync_lead(_lead())

    assert result.success is True
    assert result.contact_id == "501"
    assert result.deal_id == "901"
    assert result.action == "created"

    calls = request.call_args_list
    assert [c.args[1] for c in calls] == [
        "/crm/v3/objects/contacts/search",
        "/crm/v3/objects/contacts",
        "/crm/v3/objects/deals",
        "/crm/v3/objects/notes",
    ]
    search_filter = calls[0].kwargs["json"]["filterGroups"][0]["filters"][0]
    assert search_filter == {"propertyName": "email", "operator": "EQ", "value": "thabo@nkosi.co.za"}
    deal = calls[2].kwargs["json"]
    assert deal["properties"]["lead_urgency"] == "High"
    assert deal["associations"][0]["to"] == {"id": "501"}
    note_types = [a["types"][0]["associationTypeId"] for a in calls[3].kwargs["json"]["associations"]]
    assert note_types == [202, 214]


@pytest.mark.asyncio
async def test_updates_existing_contact_found_by_platform_id():
    responses = [
        _response("POST", "/crm/v3/objects/contacts/search", body={"results": [{"id": "333"}]}),
        _response("PATCH", "/crm/v3/objects/contacts/333", body={"id": "333"}),
        _response("POST", "/crm/v3/objects/deals", 201, {"id": "902"}),
        _response("POST", "/crm/v3/objects/notes", 201, {"id": "78"}),
    ]
    with patch.object(httpx.AsyncClient, "request", new=AsyncMock(side_effect=responses)) as request:
        result = await HubSpotClient(access_token="pat-test").sync_lead(_lead(contact_email=None))

    assert result.success is True
    assert result.contact_id == "333"
    assert result.action == "updated"
    search_filter = request.call_args_list[0].kwargs["json"]["filterGroups"][0]["filters"][0]
    assert search_filter["propertyName"] == "lead_source_platform_id"
    assert request.call_args_list[1].args[0] == "PATCH"


@pytest.mark.asyncio
async def test_api_error_becomes_failure_result():
    responses = [
        _response("POST", "/crm/v3/objects/contacts/search", body={"results": []}),
        _response("POST", "/crm/v3/objects/contacts", 400, {"message": "Property values were not valid"}),
    ]
    with patch.object(httpx.AsyncClient, "request", new=AsyncMock(side_effect=responses)):
        result = await HubSpotClient(access_token="pat-test").sync_lead(_lead())

    assert result.success is False
    assert result.error == "HubSpot API error: 400"


@pytest.mark.asyncio
async def test_lead_without_identifier_is_not_synced():
    with patch.object(httpx.AsyncClient, "request", new=AsyncMock()) as request:
        result = await HubSpotClient(access_token="pat-test").sync_lead(
            _lead(contact_email=None, source_user_id=None)
        )

    assert result.success is False
    request.assert_not_called()
