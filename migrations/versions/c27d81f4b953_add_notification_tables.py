"""add_notification_tables

Revision ID: c27d81f4b953
Revises: 8f03c5a6e2d4
Create Date: 2026-09-16 09:03:22.114870

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c27d81f4b953'
down_revision: Union[str, Sequence[str], None] = '8f03c5a6e2d4'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create notifications and notification_recipients tables."""
    op.create_table('notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('type_name', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.UUID(), nullable=True),
        sa.Column('actor_id', sa.UUID(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('notification_recipients',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('notification_id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['notification_id'], ['notifications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('notification_id', 'recipient_id'),
    )
    op.create_index(
        'ix_notification_recipients_recipient_id',
        'notification_recipients',
        ['recipient_id'],
        unique=False,
    )


def downgrade() -> None:
    """Drop notification tables."""
    op.drop_index('ix_notification_recipients_recipient_id', table_name='notification_recipients')
    op.drop_table('notification_recipients')
    op.drop_table('notifications')
