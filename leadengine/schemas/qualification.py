"""Qualification verdict contract returned by the AI qualifier."""

from typing import Optional
from pydantic import BaseModel, Field, StrictBool, field_validator

from leadengine.models.lead import Language, LeadUrgency

FALLBACK_REPLY = "Thank you for your message! We'll get back to you soon."

_EMPTY_MARKERS = {"", "null", "none", "n/a", "not found", "not mentioned", "unknown"}


class ExtractedData(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    service_requested: Optional[str] = None
    location: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _clean_field(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        if value.lower() in _EMPTY_MARKERS:
            return None
        return value


class QualificationResult(BaseModel):
    """Validated model verdict.

    ``is_lead`` must be a real boolean and ``intent_score`` a real number;
    the model is not trusted to return either in another shape.
    """
    is_lead: StrictBool
    urgency: LeadUrgency
    intent_score: float = Field(ge=0, le=100, strict=True)
    suggested_reply: str = ""
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)
    language_detected: Language = Language.UNKNOWN
    reasoning: Optional[str] = None

    @field_validator("suggested_reply", mode="before")
    @classmethod
    def _reply_or_empty(cls, value):
        return value or ""

    @field_validator("extracted_data", mode="before")
    @classmethod
    def _extracted_or_empty(cls, value):
        return value or {}

    @field_validator("language_detected", mode="before")
    @classmethod
    def _known_language(cls, value):
        if value in {lang.value for lang in Language}:
            return value
        return Language.UNKNOWN

    @property
    def score(self) -> int:
        return int(round(self.intent_score))

    @classmethod
    def fallback(cls, reason: str) -> "QualificationResult":
        """Conservative verdict used whenever qualification fails."""
        return cls(
            is_lead=False,
            urgency=LeadUrgency.LOW,
            intent_score=0,
            suggested_reply=FALLBACK_REPLY,
            extracted_data=ExtractedData(),
            language_detected=Language.UNKNOWN,
            reasoning=reason,
        )
