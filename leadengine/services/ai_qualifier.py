"""
AI lead qualification.

Sends one chat-completion request per message, asking the model for a JSON
verdict (lead or not, urgency, intent score, suggested reply, extracted
contact details, language). The response is validated against
QualificationResult; anything else, including a missing API key, yields the
conservative fallback verdict. ``qualify`` never raises.
"""

import json
import logging
import re

import httpx
from pydantic import ValidationError

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError, InvalidQualificationResponse
from leadengine.models.lead import Language, LeadSource
from leadengine.schemas.qualification import QualificationResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a Lead Qualification Specialist for South African SMEs (Small and Medium Enterprises).

Analyze each incoming social media or web form message and decide:
1. Is this a genuine business inquiry (a lead) or just social engagement?
2. How urgent is it? (High/Medium/Low)
3. Which contact and service details can be extracted?

SOUTH AFRICAN CONTEXT:
- Common languages: English, Zulu (isiZulu), Afrikaans
- Common locations: Johannesburg (JHB), Cape Town (CPT), Durban (DBN), Pretoria (PTA), Sandton, Fourways, Midrand
- High-intent keywords: "quote", "price", "help", "urgent", "emergency", "need", "how much"
- Low-intent: "nice", "lol", "wow", emojis only, complaints without a service request

URGENCY SCORING:
- HIGH (80-100): emergencies, "urgent", "today", "ASAP", a specific problem needing immediate attention
- MEDIUM (40-79): general inquiries, "quote", "price", interested but not time-sensitive
- LOW (0-39): compliments, complaints without asking for service, vague interest

If the message is in Afrikaans or Zulu, translate the extracted details to English for CRM storage,
but write the suggested reply in the original language.

Return ONLY a valid JSON object with this exact structure:
{
  "is_lead": boolean,
  "urgency": "High" | "Medium" | "Low",
  "intent_score": number (0-100),
  "suggested_reply": "string",
  "extracted_data": {
    "name": "string or null",
    "phone": "string or null",
    "email": "string or null",
    "service_requested": "string or null",
    "location": "string or null"
  },
  "language_detected": "en" | "zu" | "af" | "unknown",
  "reasoning": "brief explanation of scoring"
}"""

AFRIKAANS_KEYWORDS = {"ek", "jy", "die", "asseblief", "dankie", "goeie"}
ZULU_KEYWORDS = {"ngiyabonga", "sawubona", "yebo", "cha", "ngicela"}


def _user_prompt(message_content: str, source: str) -> str:
    return (
        f'Analyze this message from {source}:\n\n"{message_content}"\n\n'
        "Is this a qualified lead? What's the urgency? Extract any contact info."
    )


def parse_qualification(response_text: str) -> QualificationResult:
    """Parse and validate the model's JSON reply."""
    if not response_text:
        raise InvalidQualificationResponse("No response from language model")
    try:
        data = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise InvalidQualificationResponse(f"Response is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise InvalidQualificationResponse("Response is not a JSON object")
    try:
        return QualificationResult.model_validate(data)
    except ValidationError as e:
        raise InvalidQualificationResponse(f"Invalid response format from AI: {e.error_count()} field error(s)", details=e.errors())


class LeadQualifier:
    """Chat-completions client that turns a message into a qualification verdict."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def qualify(self, message_content: str, source: LeadSource | str) -> QualificationResult:
        """Qualify a message. Returns the fallback verdict on any failure."""
        source_name = source.value if isinstance(source, LeadSource) else str(source)
        try:
            response_text = await self._complete(message_content, source_name)
            result = parse_qualification(response_text)
            if result.language_detected == Language.UNKNOWN:
                result = result.model_copy(update={"language_detected": detect_language(message_content)})
            logger.info(
                "[AI] Result: is_lead=%s, urgency=%s, score=%s",
                result.is_lead, result.urgency.value, result.score,
            )
            return result
        except Exception as e:
            logger.error("AI qualification error: %s", e)
            return QualificationResult.fallback(f"AI processing failed: {e}")

    async def _complete(self, message_content: str, source: str) -> str:
        if not self.api_key:
            raise ConfigurationError("OpenAI API key is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _user_prompt(message_content, source)},
            ],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.base_url}/chat/completions", headers=headers, json=payload)
            response.raise_for_status()
            body = response.json()

        choices = body.get("choices") or []
        if not choices:
            raise InvalidQualificationResponse("No choices in language model response")
        return (choices[0].get("message") or {}).get("content") or ""


def detect_language(text: str) -> Language:
    """Cheap keyword-based language guess. The model's own field wins."""
    words = set(re.findall(r"\w+", (text or "").lower()))
    if words & AFRIKAANS_KEYWORDS:
        return Language.AFRIKAANS
    if words & ZULU_KEYWORDS:
        return Language.ZULU
    return Language.ENGLISH
