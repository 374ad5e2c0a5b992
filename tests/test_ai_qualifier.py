"""Tests for AI lead qualification and its fallback."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from leadengine.core.exceptions import InvalidQualificationResponse
from leadengine.models.lead import Language, LeadSource, LeadUrgency
from leadengine.schemas.qualification import FALLBACK_REPLY
from leadengine.services.ai_qualifier import LeadQualifier, detect_language, parse_qualification

COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"

VALID_VERDICT = {
    "is_lead": True,
    "urgency": "High",
    "intent_score": 91,
    "suggested_reply": "We can help today!",
    "extracted_data": {
        "name": "Thabo",
        "phone": "082 555 1234",
        "email": None,
        "service_requested": "plumbing",
        "location": "Sandton",
    },
    "language_detected": "en",
    "reasoning": "Urgent request with a location",
}


def _completion(content: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
        request=httpx.Request("POST", COMPLETIONS_URL),
    )


def assert_fallback(result):
    assert result.is_lead is False
    assert result.urgency == LeadUrgency.LOW
    assert result.intent_score == 0
    assert result.suggested_reply == FALLBACK_REPLY
    assert result.language_detected == Language.UNKNOWN
    assert result.extracted_data.model_dump() == {
        "name": None, "phone": None, "email": None, "service_requested": None, "location": None,
    }
    assert result.reasoning.startswith("AI processing failed")


def test_parse_valid_verdict():
    result = parse_qualification(json.dumps(VALID_VERDICT))
    assert result.is_lead is True
    assert result.urgency == LeadUrgency.HIGH
    assert result.score == 91
    assert result.extracted_data.location == "Sandton"
    assert result.extracted_data.email is None


def test_parse_rejects_string_boolean():
    with pytest.raises(InvalidQualificationResponse):
        parse_qualification(json.dumps({**VALID_VERDICT, "is_lead": "true"}))


def test_parse_rejects_string_score():
    with pytest.raises(InvalidQualificationResponse):
        parse_qualification(json.dumps({**VALID_VERDICT, "intent_score": "91"}))


def test_parse_rejects_out_of_range_score():
    with pytest.raises(InvalidQualificationResponse):
        parse_qualification(json.dumps({**VALID_VERDICT, "intent_score": 140}))


def test_parse_rejects_unknown_urgency():
    with pytest.raises(InvalidQualificationResponse):
        parse_qualification(json.dumps({**VALID_VERDICT, "urgency": "Critical"}))


def test_parse_rejects_non_json():
    with pytest.raises(InvalidQualificationResponse):
        parse_qualification("Sure! Here is the verdict: lead")


def test_parse_fills_missing_optional_fields():
    minimal = {"is_lead": False, "urgency": "Low", "intent_score": 5}
    result = parse_qualification(json.dumps(minimal))
    assert result.suggested_reply == ""
    assert result.extracted_data.name is None
    assert result.language_detected == Language.UNKNOWN


def test_parse_cleans_placeholder_values():
    data = {**VALID_VERDICT, "extracted_data": {"name": "null", "phone": "N/A", "email": "unknown"}}
    result = parse_qualification(json.dumps(data))
    assert result.extracted_data.name is None
    assert result.extracted_data.phone is None
    assert result.extracted_data.email is None


@pytest.mark.asyncio
async def test_qualify_success():
    qualifier = LeadQualifier(api_key="sk-test")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_completion(json.dumps(VALID_VERDICT)))) as post:
        result = await qualifier.qualify("I need an urgent plumber today!", LeadSource.FACEBOOK)

    assert result.is_lead is True
    assert result.score == 91
    body = post.call_args.kwargs["json"]
    assert body["response_format"] == {"type": "json_object"}
    assert body["temperature"] == 0.3
    assert "facebook" in body["messages"][1]["content"]


@pytest.mark.asyncio
async def test_qualify_without_api_key_falls_back():
    qualifier = LeadQualifier(api_key="")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock()) as post:
        result = await qualifier.qualify("I need a plumber", LeadSource.FACEBOOK)

    post.assert_not_called()
    assert_fallback(result)


@pytest.mark.asyncio
async def test_qualify_unparsable_reply_falls_back():
    qualifier = LeadQualifier(api_key="sk-test")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_completion("not json at all"))):
        result = await qualifier.qualify("I need a plumber", LeadSource.INSTAGRAM)

    assert_fallback(result)


@pytest.mark.asyncio
async def test_qualify_network_error_falls_back():
    qualifier = LeadQualifier(api_key="sk-test")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(side_effect=httpx.ConnectError("unreachable"))):
        result = await qualifier.qualify("I need a plumber", LeadSource.TIKTOK)

    assert_fallback(result)
    assert "unreachable" in result.reasoning


@pytest.mark.asyncio
async def test_qualify_http_error_falls_back():
    qualifier = LeadQualifier(api_key="sk-test")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_completion("{}", status_code=500))):
        result = await qualifier.qualify("I need a plumber", "web_form")

    assert_fallback(result)


def test_detect_language():
    assert detect_language("Goeie môre, ek soek 'n loodgieter") == Language.AFRIKAANS
    assert detect_language("Sawubona, ngicela usizo") == Language.ZULU
    assert detect_language("This is urgent, please help") == Language.ENGLISH
    assert detect_language("") == Language.ENGLISH


@pytest.mark.asyncio
async def test_qualify_guesses_language_when_model_omits_it():
    verdict = {**VALID_VERDICT, "language_detected": None}
    qualifier = LeadQualifier(api_key="sk-test")
    with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_completion(json.dumps(verdict)))):
        result = await qualifier.qualify("Goeie dag, ek soek hulp", LeadSource.FACEBOOK)

    assert result.language_detected == Language.AFRIKAANS
