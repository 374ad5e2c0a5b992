"""Lead processing pipeline.

One payload runs through five stages, strictly in order:

1. Qualify      - AI verdict (never raises, falls back to "not a lead")
2. Persist      - insert the Lead row; failure aborts the whole attempt
3. Auto-reply   - optional acknowledgment on Facebook / Instagram
4. CRM sync     - HubSpot contact + deal + note for qualified leads
5. Notify       - WhatsApp alert when the CRM sync succeeded and urgency is High

The Lead row is committed after every stage so a crash after stage N keeps
stages 1..N. Stages 3-5 record failures on the Lead (and in failed_syncs)
and the pipeline carries on.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leadengine.core.config import settings
from leadengine.core.exceptions import LeadPersistenceError
from leadengine.models.failed_sync import FailedSync, SyncIntegration
from leadengine.models.lead import Lead, LeadSource, LeadUrgency
from leadengine.models.lead_log import LeadAction
from leadengine.schemas.lead import ProcessResult
from leadengine.schemas.payload import NormalizedPayload
from leadengine.schemas.qualification import QualificationResult
from leadengine.services.ai_qualifier import LeadQualifier
from leadengine.services.auto_reply import AutoReplyResult, MetaAutoReplyClient
from leadengine.services.hubspot import HubSpotClient, HubSpotSyncResult
from leadengine.services.lead_log import log_lead_processing
from leadengine.services.whatsapp import NotificationResult, WhatsAppNotifier

logger = logging.getLogger(__name__)

AUTO_REPLY_SOURCES = {LeadSource.FACEBOOK, LeadSource.INSTAGRAM}


def _fit(column, value: Optional[str]) -> Optional[str]:
    """Trim free text to the width of a Lead string column."""
    length = Lead.__table__.c[column].type.length
    if value and len(value) > length:
        return value[:length]
    return value


@dataclass
class Integrations:
    """External collaborators used by the pipeline.

    Built once from settings for the app; tests swap in fakes.
    """
    qualifier: Any = field(default_factory=LeadQualifier)
    hubspot: Any = field(default_factory=HubSpotClient)
    whatsapp: Any = field(default_factory=WhatsAppNotifier)
    auto_reply: Any = field(default_factory=MetaAutoReplyClient)


def _error_text(error: Exception) -> str:
    return str(error) or error.__class__.__name__


class LeadProcessor:
    def __init__(
        self,
        db: AsyncSession,
        integrations: Integrations,
        enable_auto_reply: Optional[bool] = None,
        failed_sync_retry_minutes: Optional[int] = None,
    ):
        self.db = db
        self.integrations = integrations
        self.enable_auto_reply = (
            settings.ENABLE_AUTO_REPLY if enable_auto_reply is None else enable_auto_reply
        )
        self.failed_sync_retry_minutes = (
            failed_sync_retry_minutes
            if failed_sync_retry_minutes is not None
            else settings.FAILED_SYNC_RETRY_MINUTES
        )

    async def process(self, payload: NormalizedPayload) -> ProcessResult:
        logger.info("[Process] Starting processing for %s - %s", payload.source.value, payload.user_id)

        # Step 1: AI qualification
        verdict = await self.integrations.qualifier.qualify(payload.message_content, payload.source)

        # Step 2: persist (pipeline-fatal)
        lead = await self._persist_lead(payload, verdict)
        lead_id = lead.id
        await log_lead_processing(self.db, lead_id, payload.source, payload.user_id, LeadAction.PROCESSED)

        # Step 3: auto-reply
        if self._should_auto_reply(payload, verdict):
            await self._auto_reply(lead, payload, verdict)

        # Step 4: CRM sync
        crm_result: Optional[HubSpotSyncResult] = None
        if verdict.is_lead:
            crm_result = await self._sync_crm(lead, payload)
        else:
            logger.info("[AI] Not qualified - no HubSpot sync needed")
            await log_lead_processing(
                self.db, lead_id, payload.source, payload.user_id, LeadAction.REJECTED,
                {"reason": verdict.reasoning},
            )

        # Step 5: urgent notification
        if crm_result is not None and crm_result.success and verdict.urgency == LeadUrgency.HIGH:
            await self._notify(lead, payload, verdict, crm_result)

        return ProcessResult(
            success=True,
            lead_id=lead_id,
            qualified=verdict.is_lead,
            urgency=verdict.urgency,
            score=verdict.score,
        )

    async def _persist_lead(self, payload: NormalizedPayload, verdict: QualificationResult) -> Lead:
        metadata = payload.metadata
        extracted = verdict.extracted_data
        lead = Lead(
            source=payload.source,
            source_user_id=payload.user_id,
            source_post_id=_fit("source_post_id", metadata.post_id if metadata else None),
            message_content=payload.message_content,
            original_language=verdict.language_detected,
            is_qualified=verdict.is_lead,
            urgency=verdict.urgency,
            intent_score=verdict.score,
            ai_suggested_reply=verdict.suggested_reply or None,
            ai_extracted_data=extracted.model_dump(exclude_none=True),
            ai_reasoning=verdict.reasoning,
            contact_name=_fit("contact_name", extracted.name or (metadata.user_name if metadata else None)),
            contact_email=_fit("contact_email", extracted.email or (metadata.user_email if metadata else None)),
            contact_phone=_fit("contact_phone", extracted.phone or (metadata.user_phone if metadata else None)),
            lead_metadata=metadata.model_dump(mode="json", exclude_none=True) if metadata else None,
        )
        try:
            self.db.add(lead)
            await self.db.commit()
            await self.db.refresh(lead)
        except Exception as e:
            logger.error("Failed to create lead: %s", e)
            await self.db.rollback()
            raise LeadPersistenceError("Failed to create lead record", details=_error_text(e)) from e
        logger.info("Lead created: %s (qualified=%s)", lead.id, verdict.is_lead)
        return lead

    def _should_auto_reply(self, payload: NormalizedPayload, verdict: QualificationResult) -> bool:
        return bool(
            self.enable_auto_reply
            and verdict.suggested_reply
            and payload.source in AUTO_REPLY_SOURCES
        )

    async def _auto_reply(self, lead: Lead, payload: NormalizedPayload, verdict: QualificationResult) -> None:
        logger.info("[Auto-Reply] Sending reply...")
        metadata = payload.metadata
        platform_data = (metadata.platform_data if metadata else None) or {}
        message = platform_data.get("message") or {}
        try:
            result = await self.integrations.auto_reply.send_auto_reply(
                source=payload.source,
                sender_id=payload.user_id,
                reply_text=verdict.suggested_reply,
                comment_id=metadata.comment_id if metadata else None,
                message_id=message.get("mid") if isinstance(message, dict) else None,
            )
        except Exception as e:
            result = AutoReplyResult(success=False, error=_error_text(e))

        try:
            if result.success:
                await self._update_lead(lead, auto_reply_sent=True, auto_reply_sent_at=datetime.utcnow())
                logger.info("[Auto-Reply] Success")
            else:
                await self._update_lead(lead, auto_reply_error=result.error)
                logger.error("[Auto-Reply] Failed: %s", result.error)
        except Exception as e:
            logger.error("[Auto-Reply] Could not record outcome for %s: %s", payload.user_id, e)

    async def _sync_crm(self, lead: Lead, payload: NormalizedPayload) -> HubSpotSyncResult:
        logger.info("[HubSpot] Syncing qualified lead...")
        try:
            result = await self.integrations.hubspot.sync_lead(lead)
        except Exception as e:
            result = HubSpotSyncResult(success=False, error=_error_text(e))

        try:
            if result.success:
                await self._update_lead(
                    lead,
                    hubspot_contact_id=result.contact_id,
                    hubspot_deal_id=result.deal_id,
                    synced_to_hubspot=True,
                    hubspot_sync_error=None,
                )
                await log_lead_processing(
                    self.db, lead.id, payload.source, payload.user_id, LeadAction.SYNCED,
                    {"contact_id": result.contact_id, "deal_id": result.deal_id},
                )
                logger.info("[HubSpot] Success: Contact %s, Deal %s", result.contact_id, result.deal_id)
            else:
                logger.error("[HubSpot] Sync failed: %s", result.error)
                await self._update_lead(lead, hubspot_sync_error=result.error)
                await self._record_failed_sync(lead, SyncIntegration.HUBSPOT, result.error)
        except Exception as e:
            logger.error("[HubSpot] Could not record outcome for %s: %s", payload.user_id, e)
        return result

    async def _notify(
        self,
        lead: Lead,
        payload: NormalizedPayload,
        verdict: QualificationResult,
        crm_result: HubSpotSyncResult,
    ) -> None:
        logger.info("[WhatsApp] Sending high-priority notification...")
        try:
            result = await self.integrations.whatsapp.send_lead_alert(
                source=payload.source.value,
                urgency=verdict.urgency,
                message_content=payload.message_content,
                contact_name=lead.contact_name,
                hubspot_contact_id=crm_result.contact_id,
            )
        except Exception as e:
            result = NotificationResult(success=False, error=_error_text(e))

        try:
            if result.success:
                await self._update_lead(
                    lead,
                    whatsapp_notification_sent=True,
                    whatsapp_notification_at=datetime.utcnow(),
                )
                logger.info("[WhatsApp] Notification sent: %s", result.message_sid)
            else:
                logger.error("[WhatsApp] Failed: %s", result.error)
                await self._update_lead(lead, whatsapp_notification_error=result.error)
                await self._record_failed_sync(lead, SyncIntegration.WHATSAPP, result.error)
        except Exception as e:
            logger.error("[WhatsApp] Could not record outcome for %s: %s", payload.user_id, e)

    async def _update_lead(self, lead: Lead, **values) -> None:
        for name, value in values.items():
            setattr(lead, name, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self._reload(lead)
            raise

    async def _reload(self, lead: Lead) -> None:
        """Re-read the lead after a rollback expired it."""
        try:
            await self.db.refresh(lead)
        except Exception as e:
            logger.error("Could not reload lead after rollback: %s", e)

    async def _record_failed_sync(self, lead: Lead, integration: SyncIntegration, error: Optional[str]) -> None:
        """Append to the failed_syncs audit ledger. Nothing re-drives these automatically."""
        self.db.add(FailedSync(
            lead_id=lead.id,
            integration=integration,
            error_message=error,
            next_retry_at=datetime.utcnow() + timedelta(minutes=self.failed_sync_retry_minutes),
        ))
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self._reload(lead)
            raise


async def process_inbound_lead(
    db: AsyncSession,
    payload: NormalizedPayload,
    integrations: Integrations,
) -> ProcessResult:
    """Run the full pipeline for one payload."""
    return await LeadProcessor(db, integrations).process(payload)
