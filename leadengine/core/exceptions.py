"""Lead engine error types.

Stage-local integration failures never raise; they come back as result
objects. The exceptions here are the ones that cross a boundary.
"""

from typing import Any, Optional


class LeadEngineError(Exception):
    """Base error carrying a machine-readable code."""

    code = "lead_engine_error"

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details


class ConfigurationError(LeadEngineError):
    """A required credential or endpoint is missing. Raised on first use."""

    code = "configuration_error"


class LeadPersistenceError(LeadEngineError):
    """The lead row could not be written. Aborts the pipeline."""

    code = "lead_persistence_error"


class QueueError(LeadEngineError):
    """A payload could not be queued for processing."""

    code = "queue_error"


class InvalidQualificationResponse(LeadEngineError):
    """The language model returned something that is not a valid verdict."""

    code = "invalid_qualification_response"
