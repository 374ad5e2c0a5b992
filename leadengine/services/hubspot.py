"""HubSpot CRM connector.

Upserts a contact for a qualified lead, opens a deal linked to it and
attaches a note with the AI context. Uses the CRM v3 REST API.
``sync_lead`` never raises; failures come back as an error result.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError
from leadengine.models.lead import Lead

logger = logging.getLogger(__name__)

HUBSPOT_BASE_URL = "https://api.hubapi.com"

# HUBSPOT_DEFINED association type ids
DEAL_TO_CONTACT = 3
NOTE_TO_CONTACT = 202
NOTE_TO_DEAL = 214


@dataclass
class HubSpotSyncResult:
    success: bool
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None
    error: Optional[str] = None
    action: str = "skipped"  # created, updated, skipped


def _association(object_id: str, type_id: int) -> Dict[str, Any]:
    return {
        "to": {"id": object_id},
        "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": type_id}],
    }


def _enum_value(value) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)


def build_contact_properties(lead: Lead) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    if lead.contact_name:
        parts = lead.contact_name.split()
        properties["firstname"] = parts[0]
        properties["lastname"] = " ".join(parts[1:]) or parts[0]
    if lead.contact_email:
        properties["email"] = lead.contact_email
    if lead.contact_phone:
        properties["phone"] = lead.contact_phone
    properties["lead_source"] = _enum_value(lead.source)
    if lead.source_user_id:
        properties["lead_source_platform_id"] = lead.source_user_id
    properties["lead_original_message"] = lead.message_content
    return properties


def build_note_body(lead: Lead) -> str:
    urgency = _enum_value(lead.urgency) or "Unknown"
    body = (
        "AI Lead Qualification:\n\n"
        f"Source: {_enum_value(lead.source)}\n"
        f"Urgency: {urgency}\n"
        f"Intent Score: {lead.intent_score or 0}/100\n\n"
        f'Original Message:\n"{lead.message_content}"\n\n'
    )
    if lead.ai_suggested_reply:
        body += f'AI Suggested Reply:\n"{lead.ai_suggested_reply}"'
    return body


class HubSpotClient:
    """HubSpot CRM integration client."""

    def __init__(
        self,
        access_token: str | None = None,
        deal_stage: str | None = None,
        pipeline_id: str | None = None,
        base_url: str = HUBSPOT_BASE_URL,
        timeout: float | None = None,
    ):
        self.access_token = access_token if access_token is not None else settings.HUBSPOT_ACCESS_TOKEN
        self.deal_stage = deal_stage or settings.HUBSPOT_DEAL_STAGE
        self.pipeline_id = pipeline_id or settings.HUBSPOT_PIPELINE_ID
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise ConfigurationError("HubSpot access token is not configured")
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def sync_lead(self, lead: Lead) -> HubSpotSyncResult:
        """Create or update the contact, then create a deal and a note."""
        try:
            headers = self._headers()

            identifier = lead.contact_email or lead.source_user_id
            if not identifier:
                return HubSpotSyncResult(
                    success=False,
                    error="No contact identifier (email or social ID) available",
                )

            async with httpx.AsyncClient(base_url=self.base_url, headers=headers, timeout=self.timeout) as client:
                contact_id = await self._find_contact(client, lead)
                properties = build_contact_properties(lead)

                if contact_id:
                    await self._request(client, "PATCH", f"/crm/v3/objects/contacts/{contact_id}", {"properties": properties})
                    action = "updated"
                else:
                    created = await self._request(client, "POST", "/crm/v3/objects/contacts", {"properties": properties})
                    contact_id = str(created["id"])
                    action = "created"

                deal = await self._request(client, "POST", "/crm/v3/objects/deals", {
                    "properties": self._deal_properties(lead, identifier),
                    "associations": [_association(contact_id, DEAL_TO_CONTACT)],
                })
                deal_id = str(deal["id"])

                await self._request(client, "POST", "/crm/v3/objects/notes", {
                    "properties": {
                        "hs_note_body": build_note_body(lead),
                        "hs_timestamp": str(int(datetime.now(timezone.utc).timestamp() * 1000)),
                    },
                    "associations": [
                        _association(contact_id, NOTE_TO_CONTACT),
                        _association(deal_id, NOTE_TO_DEAL),
                    ],
                })

            logger.info("HubSpot contact %s (%s), deal %s", contact_id, action, deal_id)
            return HubSpotSyncResult(success=True, contact_id=contact_id, deal_id=deal_id, action=action)

        except httpx.HTTPStatusError as e:
            logger.error("HubSpot API error %s: %s", e.response.status_code, e.response.text[:300])
            return HubSpotSyncResult(success=False, error=f"HubSpot API error: {e.response.status_code}")
        except Exception as e:
            logger.error("HubSpot sync error: %s", e)
            return HubSpotSyncResult(success=False, error=str(e) or "Unknown HubSpot error")

    async def _find_contact(self, client: httpx.AsyncClient, lead: Lead) -> Optional[str]:
        """Search by email, or by platform id when there is no email."""
        if lead.contact_email:
            prop, value = "email", lead.contact_email
        else:
            prop, value = "lead_source_platform_id", lead.source_user_id
        try:
            data = await self._request(client, "POST", "/crm/v3/objects/contacts/search", {
                "filterGroups": [{"filters": [{"propertyName": prop, "operator": "EQ", "value": value}]}],
                "properties": ["email", "firstname", "lastname"],
                "limit": 1,
            })
        except httpx.HTTPError as e:
            logger.warning("Contact search failed, will create new: %s", e)
            return None
        results = data.get("results") or []
        return str(results[0]["id"]) if results else None

    def _deal_properties(self, lead: Lead, identifier: str) -> Dict[str, str]:
        close_date = datetime.now(timezone.utc) + timedelta(days=30)
        properties = {
            "dealname": f"{_enum_value(lead.source)} Lead - {lead.contact_name or identifier}",
            "dealstage": self.deal_stage,
            "pipeline": self.pipeline_id,
            "amount": "0",
            "lead_source_platform": _enum_value(lead.source),
            "lead_intent_score": str(lead.intent_score or 0),
            "closedate": str(int(close_date.timestamp() * 1000)),
        }
        if lead.urgency:
            properties["lead_urgency"] = _enum_value(lead.urgency)
        return properties

    async def _request(self, client: httpx.AsyncClient, method: str, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await client.request(method, path, json=body)
        response.raise_for_status()
        return response.json() if response.content else {}
