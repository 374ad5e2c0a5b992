"""Tests for channel payload normalization."""

import hashlib
import hmac
from datetime import datetime

from leadengine.models.lead import LeadSource
from leadengine.schemas.payload import WebFormSubmission
from leadengine.services.normalizers import (
    normalize_meta_payload,
    normalize_tiktok_payload,
    normalize_web_form,
    verify_meta_signature,
)


def test_meta_signature():
    body = b'{"object":"page"}'
    good = "sha256=" + hmac.new(b"secret", body, hashlib.sha256).hexdigest()

    assert verify_meta_signature(body, good, "secret") is True
    assert verify_meta_signature(body, good, "other") is False
    assert verify_meta_signature(body, None, "secret") is False
    assert verify_meta_signature(body, good, "") is False


def test_instagram_message():
    body = {
        "object": "instagram",
        "entry": [{"messaging": [{
            "sender": {"id": "IG-1"},
            "timestamp": 1760860800000,
            "message": {"mid": "m_1", "text": "Ngicela intengo"},
        }]}],
    }

    [payload] = normalize_meta_payload(body)

    assert payload.source == LeadSource.INSTAGRAM
    assert payload.user_id == "IG-1"
    assert payload.message_content == "Ngicela intengo"
    assert payload.timestamp == datetime(2025, 10, 19, 8, 0, 0)
    assert payload.metadata.platform_data["message"]["mid"] == "m_1"


def test_meta_skips_non_text_messages():
    body = {
        "object": "page",
        "entry": [{"messaging": [
            {"sender": {"id": "U1"}, "timestamp": 1, "message": {"attachments": [{"type": "image"}]}},
            {"sender": {"id": "U1"}, "timestamp": 1, "read": {"watermark": 1}},
        ]}],
    }
    assert normalize_meta_payload(body) == []


def test_page_feed_comment():
    body = {
        "object": "page",
        "entry": [{"changes": [{
            "field": "feed",
            "value": {
                "item": "comment",
                "verb": "add",
                "message": "Do you service Midrand?",
                "post_id": "P_1",
                "comment_id": "C_1",
                "from": {"id": "FB-7", "name": "Sipho"},
            },
        }]}],
    }

    [payload] = normalize_meta_payload(body)

    assert payload.source == LeadSource.FACEBOOK
    assert payload.user_id == "FB-7"
    assert payload.metadata.post_id == "P_1"
    assert payload.metadata.comment_id == "C_1"
    assert payload.metadata.user_name == "Sipho"


def test_page_feed_ignores_likes():
    body = {"object": "page", "entry": [{"changes": [{"field": "feed", "value": {"item": "reaction"}}]}]}
    assert normalize_meta_payload(body) == []


def test_tiktok_comment():
    body = {
        "event": "video.comment",
        "timestamp": 1760860800,
        "data": {"user_id": "tt-1", "text": "Price for a braai stand?", "video_id": "v9", "comment_id": "c9"},
    }

    [payload] = normalize_tiktok_payload(body)

    assert payload.source == LeadSource.TIKTOK
    assert payload.timestamp == datetime(2025, 10, 19, 8, 0, 0)
    assert payload.metadata.post_id == "v9"


def test_tiktok_comment_without_text_is_skipped():
    assert normalize_tiktok_payload({"event": "comment.created", "data": {"user_id": "tt-1"}}) == []


def test_web_form_identity_falls_back_to_phone():
    submission = WebFormSubmission(name="Lerato", phone="+27825550000", message="Call me back please")

    payload = normalize_web_form(submission)

    assert payload.source == LeadSource.WEB_FORM
    assert payload.user_id == "+27825550000"
    assert payload.metadata.user_phone == "+27825550000"
    assert payload.metadata.user_name == "Lerato"
