"""Automated replies to Facebook comments and Messenger / Instagram DMs."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError
from leadengine.models.lead import LeadSource

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.facebook.com"


@dataclass
class AutoReplyResult:
    success: bool
    reply_id: Optional[str] = None
    error: Optional[str] = None


class MetaAutoReplyClient:
    """Meta Graph API client for replying on the originating channel."""

    def __init__(
        self,
        page_access_token: str | None = None,
        api_version: str | None = None,
        base_url: str = GRAPH_BASE_URL,
        timeout: float | None = None,
    ):
        self.page_access_token = (
            page_access_token if page_access_token is not None else settings.META_PAGE_ACCESS_TOKEN
        )
        self.api_version = api_version or settings.META_GRAPH_API_VERSION
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def send_auto_reply(
        self,
        source: LeadSource,
        sender_id: str,
        reply_text: str,
        comment_id: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> AutoReplyResult:
        """Reply publicly to a Facebook comment, otherwise send a private message."""
        try:
            if not self.page_access_token:
                raise ConfigurationError("META_PAGE_ACCESS_TOKEN not configured")

            if source == LeadSource.FACEBOOK and comment_id:
                return await self.reply_to_comment(comment_id, reply_text)

            if message_id or sender_id:
                return await self.send_private_message(sender_id, reply_text)

            raise ValueError("Invalid auto-reply parameters: missing comment_id or sender_id")
        except Exception as e:
            logger.error("[Auto-Reply] Error: %s", e)
            return AutoReplyResult(success=False, error=str(e) or "Unknown auto-reply error")

    async def reply_to_comment(self, comment_id: str, reply_text: str) -> AutoReplyResult:
        data = await self._post(f"/{comment_id}/comments", {
            "message": reply_text,
            "access_token": self.page_access_token,
        })
        return AutoReplyResult(success=True, reply_id=data.get("id"))

    async def send_private_message(self, recipient_id: str, message_text: str) -> AutoReplyResult:
        data = await self._post("/me/messages", {
            "recipient": {"id": recipient_id},
            "message": {"text": message_text},
            "access_token": self.page_access_token,
        })
        return AutoReplyResult(success=True, reply_id=data.get("message_id"))

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{self.api_version}{path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, json=body)
        if response.status_code >= 400:
            raise RuntimeError(f"Meta Graph API error {response.status_code}: {response.text[:300]}")
        return response.json()
