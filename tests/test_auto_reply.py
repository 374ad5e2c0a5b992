"""Tests for Meta Graph API auto-replies."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from leadengine.models.lead import LeadSource
from leadengine.services.auto_reply import MetaAutoReplyClient


def _graph_response(status_code=200, body=None):
    return httpx.Response(status_code, json=body or {})


@pytest.mark.asyncio
async def test_facebook_comment_gets_public_reply():
    client = MetaAutoReplyClient(page_access_token="page-token", api_version="v18.0")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_graph_response(body={"id": "c_reply"}))) as post:
        result = await client.send_auto_reply(LeadSource.FACEBOOK, "U1", "Thanks!", comment_id="c_1")

    assert result.success is True
    assert result.reply_id == "c_reply"
    assert post.call_args.args[0] == "https://graph.facebook.com/v18.0/c_1/comments"
    assert post.call_args.kwargs["json"]["message"] == "Thanks!"


@pytest.mark.asyncio
async def test_instagram_dm_gets_private_message():
    client = MetaAutoReplyClient(page_access_token="page-token", api_version="v18.0")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_graph_response(body={"message_id": "m_9"}))) as post:
        result = await client.send_auto_reply(LeadSource.INSTAGRAM, "IG-1", "Sawubona!", comment_id="ignored")

    assert result.success is True
    assert result.reply_id == "m_9"
    assert post.call_args.args[0] == "https://graph.facebook.com/v18.0/me/messages"
    assert post.call_args.kwargs["json"]["recipient"] == {"id": "IG-1"}


@pytest.mark.asyncio
async def test_graph_error_is_failure():
    client = MetaAutoReplyClient(page_access_token="page-token")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_graph_response(400, {"error": {"code": 10}}))):
        result = await client.send_auto_reply(LeadSource.FACEBOOK, "U1", "Thanks!")

    assert result.success is False
    assert "400" in result.error


@pytest.mark.asyncio
async def test_missing_token_is_failure():
    result = await MetaAutoReplyClient(page_access_token="").send_auto_reply(LeadSource.FACEBOOK, "U1", "Thanks!")
    assert result.success is False
    assert "not configured" in result.error


@pytest.mark.asyncio
async def test_missing_recipient_is_failure():
    client = MetaAutoReplyClient(page_access_token="page-token")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock()) as post:
        result = await client.send_auto_reply(LeadSource.INSTAGRAM, "", "Thanks!")

    assert result.success is False
    post.assert_not_called()
