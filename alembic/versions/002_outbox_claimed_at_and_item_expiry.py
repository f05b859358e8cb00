"""add claimed_at to notification_outbox and expires_at index to items

Revision ID: 002_outbox_claimed_at
Revises: 001_create_notification_pipeline
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_outbox_claimed_at'
down_revision: Union[str, None] = '001_create_notification_pipeline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Momento em que o worker pegou o evento (detecção de eventos presos)
    op.add_column('notification_outbox', sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True))

    # Busca periódica de itens de comida vencidos
    op.create_index('ix_items_expires_at', 'items', ['expires_at'])


def downgrade() -> None:
    op.drop_index('ix_items_expires_at', table_name='items')
    op.drop_column('notification_outbox', 'claimed_at')
