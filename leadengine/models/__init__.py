"""Import all models so they register with Base.metadata."""

from leadengine.models.lead import Lead, LeadSource, LeadUrgency, Language  # noqa: F401
from leadengine.models.processing_queue import ProcessingQueueItem, QueueStatus  # noqa: F401
from leadengine.models.failed_sync import FailedSync, SyncIntegration  # noqa: F401
from leadengine.models.webhook_event import WebhookEvent  # noqa: F401
from leadengine.models.lead_log import LeadLog, LeadAction  # noqa: F401
