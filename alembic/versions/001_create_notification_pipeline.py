"""create items and notification pipeline tables

Revision ID: 001_create_notification_pipeline
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision = '001_create_notification_pipeline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """
    Cria items, profiles, user_notifications, user_device_tokens,
    notification_send_log e notification_outbox.
    """
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    op.create_table(
        'items',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('main_category', sa.String(64), nullable=False),
        sa.Column('sub_category', sa.String(64), nullable=False, server_default=''),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('contact_number', sa.String(32), nullable=False),
        sa.Column('contact1', sa.String(32), nullable=True),
        sa.Column('contact2', sa.String(32), nullable=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('image_urls', JSONB, nullable=False, server_default='[]'),
        sa.Column('video_url', sa.String(1024), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_items_owner_id', 'items', ['owner_id'])
    op.create_index('ix_items_is_active', 'items', ['is_active'])
    op.create_index('ix_items_main_category', 'items', ['main_category'])
    op.create_index('ix_items_created_at', 'items', ['created_at'])

    op.create_table(
        'user_notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('payload', JSONB, nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_user_notifications_user_id', 'user_notifications', ['user_id'])
    op.create_index('ix_user_notifications_type', 'user_notifications', ['type'])
    op.create_index('ix_user_notifications_created_at', 'user_notifications', ['created_at'])

    op.create_table(
        'user_device_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('device_token', sa.String(512), nullable=False),
        sa.Column('platform', sa.String(16), nullable=False, server_default='android'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('user_id', 'device_token', name='uq_user_device_tokens_user_token'),
    )
    op.create_index('ix_user_device_tokens_user_id', 'user_device_tokens', ['user_id'])
    op.create_index('ix_user_device_tokens_device_token', 'user_device_tokens', ['device_token'])
    op.create_index('ix_user_device_tokens_is_active', 'user_device_tokens', ['is_active'])

    op.create_table(
        'notification_send_log',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_ids', JSONB, nullable=False, server_default='[]'),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('type', sa.String(50), nullable=True),
        sa.Column('success_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('failure_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('results', JSONB, nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )

    op.create_table(
        'notification_outbox',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('event_type', sa.String(32), nullable=False),
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('actor_id', sa.String(64), nullable=False),
        sa.Column('payload', JSONB, nullable=False, server_default='{}'),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_notification_outbox_item_id', 'notification_outbox', ['item_id'])
    op.create_index('ix_notification_outbox_status', 'notification_outbox', ['status'])


def downgrade():
    """Remove as tabelas do pipeline de notificações"""
    op.drop_index('ix_notification_outbox_status', table_name='notification_outbox')
    op.drop_index('ix_notification_outbox_item_id', table_name='notification_outbox')
    op.drop_table('notification_outbox')
    op.drop_table('notification_send_log')
    op.drop_index('ix_user_device_tokens_is_active', table_name='user_device_tokens')
    op.drop_index('ix_user_device_tokens_device_token', table_name='user_device_tokens')
    op.drop_index('ix_user_device_tokens_user_id', table_name='user_device_tokens')
    op.drop_table('user_device_tokens')
    op.drop_index('ix_user_notifications_created_at', table_name='user_notifications')
    op.drop_index('ix_user_notifications_type', table_name='user_notifications')
    op.drop_index('ix_user_notifications_user_id', table_name='user_notifications')
    op.drop_table('user_notifications')
    op.drop_index('ix_items_created_at', table_name='items')
    op.drop_index('ix_items_main_category', table_name='items')
    op.drop_index('ix_items_is_active', table_name='items')
    op.drop_index('ix_items_owner_id', table_name='items')
    op.drop_table('items')
    op.drop_table('profiles')
