"""Twilio WhatsApp alerts for high-priority leads.

The business owner gets one message per High urgency lead with the
source, contact name, a trimmed copy of the message and a HubSpot link.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError
from leadengine.models.lead import LeadUrgency

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_CHARS = 200


@dataclass
class NotificationResult:
    success: bool
    message_sid: Optional[str] = None
    error: Optional[str] = None


def build_alert_body(
    source: str,
    contact_name: Optional[str],
    message_content: str,
    hubspot_contact_id: Optional[str] = None,
    portal_id: Optional[str] = None,
) -> str:
    preview = message_content[:MESSAGE_PREVIEW_CHARS]
    if len(message_content) > MESSAGE_PREVIEW_CHARS:
        preview += "..."
    parts = [
        "🔥 *Maru Alert: High Priority Lead*",
        "",
        f"📱 Source: {source.upper()}",
        f"👤 From: {contact_name or 'Unknown'}",
        "",
        f'💬 Message:\n"{preview}"',
    ]
    if hubspot_contact_id and portal_id:
        parts.append(f"\n🔗 View in HubSpot: https://app.hubspot.com/contacts/{portal_id}/contact/{hubspot_contact_id}")
    return "\n".join(parts)


class WhatsAppNotifier:
    """Sends WhatsApp messages through the Twilio REST API."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        to_number: str | None = None,
        portal_id: str | None = None,
    ):
        self.account_sid = account_sid if account_sid is not None else settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token if auth_token is not None else settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number if from_number is not None else settings.TWILIO_WHATSAPP_FROM
        self.to_number = to_number if to_number is not None else settings.TWILIO_WHATSAPP_TO
        self.portal_id = portal_id if portal_id is not None else settings.HUBSPOT_PORTAL_ID
        self._client: Client | None = None

    def _get_client(self) -> Client:
        if self._client is None:
            if not self.account_sid or not self.auth_token:
                raise ConfigurationError("Twilio credentials are not configured")
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    async def send_lead_alert(
        self,
        source: str,
        urgency: LeadUrgency | str,
        message_content: str,
        contact_name: Optional[str] = None,
        hubspot_contact_id: Optional[str] = None,
    ) -> NotificationResult:
        """Alert the owner about a lead. Only High urgency is actually sent."""
        try:
            client = self._get_client()
            if not self.from_number or not self.to_number:
                raise ConfigurationError("WhatsApp phone numbers not configured")

            if urgency != LeadUrgency.HIGH:
                return NotificationResult(success=True, message_sid="skipped-low-urgency")

            body = build_alert_body(source, contact_name, message_content, hubspot_contact_id, self.portal_id)
            message = client.messages.create(from_=self.from_number, to=self.to_number, body=body)
            logger.info("WhatsApp alert sent to %s, SID: %s", self.to_number, message.sid)
            return NotificationResult(success=True, message_sid=message.sid)
        except TwilioRestException as e:
            logger.error("Twilio error sending WhatsApp alert: %s", e)
            return NotificationResult(success=False, error=str(e))
        except Exception as e:
            logger.error("WhatsApp notification error: %s", e)
            return NotificationResult(success=False, error=str(e) or "Unknown WhatsApp error")

    async def send_template(self, to: str, content_sid: str, params: Sequence[str]) -> NotificationResult:
        """Send a pre-approved WhatsApp Business template."""
        try:
            client = self._get_client()
            if not self.from_number:
                raise ConfigurationError("WhatsApp sender number not configured")

            variables = {str(index): value for index, value in enumerate(params, start=1)}
            message = client.messages.create(
                from_=self.from_number,
                to=to,
                content_sid=content_sid,
                content_variables=json.dumps(variables),
            )
            return NotificationResult(success=True, message_sid=message.sid)
        except Exception as e:
            logger.error("WhatsApp template error: %s", e)
            return NotificationResult(success=False, error=str(e) or "Unknown WhatsApp template error")
