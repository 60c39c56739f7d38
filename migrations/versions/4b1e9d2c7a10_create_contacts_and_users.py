"""create_contacts_and_users

Revision ID: 4b1e9d2c7a10
Revises:
Create Date: 2026-09-14 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4b1e9d2c7a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = "'SUPER_ADMIN', 'ADMIN', 'ADMIN_STAFF', 'CUSTOMER', 'ENERGY_RENTER', 'USER'"


def upgrade() -> None:
    """Create contacts, contact_emails and users tables."""
    op.create_table('contacts',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('phones', postgresql.JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('contact_emails',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('contact_id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # One email belongs to at most one contact
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_contact_emails_contact_id', 'contact_emails', ['contact_id'], unique=False)

    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('contact_id', sa.UUID(), nullable=False),
        sa.Column('email_verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_two_factor_enabled', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('profile_completed', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(f"role IN ({ROLES})", name='ck_users_role'),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        # One user per contact
        sa.UniqueConstraint('contact_id'),
    )


def downgrade() -> None:
    """Drop users, contact_emails and contacts tables."""
    op.drop_table('users')
    op.drop_index('ix_contact_emails_contact_id', table_name='contact_emails')
    op.drop_table('contact_emails')
    op.drop_table('contacts')
