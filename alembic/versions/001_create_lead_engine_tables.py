"""create lead engine tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:12:44.301582
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SOURCES = ('facebook', 'instagram', 'tiktok', 'linkedin', 'web_form')


def upgrade() -> None:
    op.create_table(
        'leads',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('source', sa.Enum(*SOURCES, name='lead_source'), nullable=False),
        sa.Column('source_user_id', sa.String(255), nullable=True),
        sa.Column('source_post_id', sa.String(255), nullable=True),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        sa.Column('message_content', sa.Text(), nullable=False),
        sa.Column(
            'original_language',
            sa.Enum('en', 'zu', 'af', 'unknown', name='lead_language'),
            nullable=False,
            server_default='unknown',
        ),
        sa.Column('translated_content', sa.Text(), nullable=True),
        sa.Column('is_qualified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('urgency', sa.Enum('High', 'Medium', 'Low', name='lead_urgency'), nullable=True),
        sa.Column('intent_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ai_suggested_reply', sa.Text(), nullable=True),
        sa.Column('ai_extracted_data', JSONB(), nullable=True),
        sa.Column('ai_reasoning', sa.Text(), nullable=True),
        sa.Column('hubspot_contact_id', sa.String(64), nullable=True),
        sa.Column('hubspot_deal_id', sa.String(64), nullable=True),
        sa.Column('synced_to_hubspot', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('hubspot_sync_error', sa.Text(), nullable=True),
        sa.Column('whatsapp_notification_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('whatsapp_notification_at', sa.DateTime(), nullable=True),
        sa.Column('whatsapp_notification_error', sa.Text(), nullable=True),
        sa.Column('auto_reply_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_reply_sent_at', sa.DateTime(), nullable=True),
        sa.Column('auto_reply_error', sa.Text(), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
    )
    op.create_index('ix_leads_created_at', 'leads', ['created_at'])
    op.create_index('ix_leads_source_user_created', 'leads', ['source', 'source_user_id', 'created_at'])

    op.create_table(
        'processing_queue',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('source', sa.Enum(*SOURCES, name='queue_source'), nullable=False),
        sa.Column('source_user_id', sa.String(255), nullable=False),
        sa.Column('payload', JSONB(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'processing', 'completed', 'failed', name='queue_status'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_retries', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('next_retry_at', sa.DateTime(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('result', JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_processing_queue_status', 'processing_queue', ['status'])
    op.create_index('ix_processing_queue_created_at', 'processing_queue', ['created_at'])
    op.create_index('ix_processing_queue_status_next_retry', 'processing_queue', ['status', 'next_retry_at'])
    op.create_index('ix_processing_queue_source_user', 'processing_queue', ['source', 'source_user_id'])

    op.create_table(
        'failed_syncs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('lead_id', UUID(as_uuid=True), sa.ForeignKey('leads.id'), nullable=False),
        sa.Column('integration', sa.Enum('hubspot', 'whatsapp', name='sync_integration'), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('next_retry_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_failed_syncs_lead_id', 'failed_syncs', ['lead_id'])
    op.create_index('ix_failed_syncs_integration', 'failed_syncs', ['integration'])

    op.create_table(
        'webhook_events',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('source', sa.Enum(*SOURCES, name='webhook_source'), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=True),
        sa.Column('raw_payload', JSONB(), nullable=False),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('processing_error', sa.Text(), nullable=True),
        sa.Column('lead_id', UUID(as_uuid=True), nullable=True),
    )
    op.create_index('ix_webhook_events_created_at', 'webhook_events', ['created_at'])
    op.create_index('ix_webhook_events_processed', 'webhook_events', ['processed'])

    op.create_table(
        'lead_logs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('lead_id', UUID(as_uuid=True), nullable=False),
        sa.Column('source', sa.Enum(*SOURCES, name='lead_log_source'), nullable=False),
        sa.Column('source_user_id', sa.String(255), nullable=True),
        sa.Column(
            'action',
            sa.Enum('received', 'processed', 'qualified', 'rejected', 'synced', 'error', name='lead_action'),
            nullable=False,
        ),
        sa.Column('details', JSONB(), nullable=True),
    )
    op.create_index('ix_lead_logs_lead_id', 'lead_logs', ['lead_id'])


def downgrade() -> None:
    op.drop_index('ix_lead_logs_lead_id', 'lead_logs')
    op.drop_table('lead_logs')
    op.drop_index('ix_webhook_events_processed', 'webhook_events')
    op.drop_index('ix_webhook_events_created_at', 'webhook_events')
    op.drop_table('webhook_events')
    op.drop_index('ix_failed_syncs_integration', 'failed_syncs')
    op.drop_index('ix_failed_syncs_lead_id', 'failed_syncs')
    op.drop_table('failed_syncs')
    op.drop_index('ix_processing_queue_source_user', 'processing_queue')
    op.drop_index('ix_processing_queue_status_next_retry', 'processing_queue')
    op.drop_index('ix_processing_queue_created_at', 'processing_queue')
    op.drop_index('ix_processing_queue_status', 'processing_queue')
    op.drop_table('processing_queue')
    op.drop_index('ix_leads_source_user_created', 'leads')
    op.drop_index('ix_leads_created_at', 'leads')
    op.drop_table('leads')
    for enum_name in (
        'lead_action', 'lead_log_source', 'webhook_source', 'sync_integration',
        'queue_status', 'queue_source', 'lead_urgency', 'lead_language', 'lead_source',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
