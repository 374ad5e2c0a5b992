"""Channel payload → NormalizedPayload translation.

Each inbound channel speaks its own webhook format; everything after this
module only sees NormalizedPayload.
"""

import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from leadengine.models.lead import LeadSource
from leadengine.schemas.payload import NormalizedPayload, PayloadMetadata, WebFormSubmission

logger = logging.getLogger(__name__)


def verify_meta_signature(raw_body: bytes, signature: Optional[str], app_secret: str) -> bool:
    """Check the X-Hub-Signature-256 header against the app secret."""
    if not signature or not app_secret:
        return False
    expected = "sha256=" + hmac.new(app_secret.encode(), raw_body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature, expected)


def _from_millis(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc).replace(tzinfo=None)
    except (TypeError, ValueError, OverflowError, OSError):
        return datetime.utcnow()


def _from_seconds(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)
    except (TypeError, ValueError, OverflowError, OSError):
        return datetime.utcnow()


def _build(source: LeadSource, user_id: Any, text: Any, timestamp: datetime, **metadata) -> Optional[NormalizedPayload]:
    try:
        return NormalizedPayload(
            source=source,
            user_id=str(user_id) if user_id is not None else "",
            message_content=text or "",
            timestamp=timestamp,
            metadata=PayloadMetadata(**{k: v for k, v in metadata.items() if v is not None}),
        )
    except ValidationError as e:
        logger.warning("Skipping unusable %s event: %s", source.value, e.error_count())
        return None


def normalize_meta_payload(body: Dict[str, Any]) -> List[NormalizedPayload]:
    """Messenger / Instagram DMs and Page feed comments."""
    source = LeadSource.INSTAGRAM if body.get("object") == "instagram" else LeadSource.FACEBOOK
    payloads: List[NormalizedPayload] = []

    for entry in body.get("entry") or []:
        for message in entry.get("messaging") or []:
            text = (message.get("message") or {}).get("text")
            if not text:
                continue
            payload = _build(
                source,
                (message.get("sender") or {}).get("id"),
                text,
                _from_millis(message.get("timestamp")),
                platform_data=message,
            )
            if payload:
                payloads.append(payload)

        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            if change.get("field") != "feed" or value.get("item") != "comment" or not value.get("message"):
                continue
            sender = value.get("from") or {}
            payload = _build(
                LeadSource.FACEBOOK,
                sender.get("id") or value.get("sender_id") or "unknown",
                value.get("message"),
                datetime.utcnow(),
                post_id=value.get("post_id"),
                comment_id=value.get("comment_id"),
                user_name=sender.get("name"),
                platform_data=value,
            )
            if payload:
                payloads.append(payload)

    return payloads


TIKTOK_COMMENT_EVENTS = {"comment.created", "video.comment"}


def normalize_tiktok_payload(body: Dict[str, Any]) -> List[NormalizedPayload]:
    if body.get("event") not in TIKTOK_COMMENT_EVENTS:
        return []
    data = body.get("data") or {}
    if not data.get("text") or not data.get("user_id"):
        return []
    payload = _build(
        LeadSource.TIKTOK,
        data.get("user_id"),
        data.get("text"),
        _from_seconds(body.get("timestamp")),
        post_id=data.get("video_id"),
        comment_id=data.get("comment_id"),
        platform_data=data,
    )
    return [payload] if payload else []


def normalize_web_form(submission: WebFormSubmission) -> NormalizedPayload:
    """Web form: the email (or phone, or name) identifies the visitor."""
    user_id = submission.email or submission.phone or submission.name
    return NormalizedPayload(
        source=LeadSource.WEB_FORM,
        user_id=str(user_id),
        message_content=submission.message,
        timestamp=datetime.utcnow(),
        metadata=PayloadMetadata(
            user_name=submission.name,
            user_email=submission.email,
            user_phone=submission.phone,
            platform_data=submission.model_dump(mode="json", exclude_none=True),
        ),
    )
