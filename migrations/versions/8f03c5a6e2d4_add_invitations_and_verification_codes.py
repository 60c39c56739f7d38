"""add_invitations_and_verification_codes

Revision ID: 8f03c5a6e2d4
Revises: 4b1e9d2c7a10
Create Date: 2026-09-14 11:47:05.902517

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8f03c5a6e2d4'
down_revision: Union[str, Sequence[str], None] = '4b1e9d2c7a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = "'SUPER_ADMIN', 'ADMIN', 'ADMIN_STAFF', 'CUSTOMER', 'ENERGY_RENTER', 'USER'"


def upgrade() -> None:
    """Create invitations and verification_codes tables."""
    op.create_table('invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('sender_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(f"role IN ({ROLES})", name='ck_invitations_role'),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'expired', 'revoked')", name='ck_invitations_status'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash'),
    )
    # At most one pending invitation per email
    op.create_index(
        'uq_invitations_pending_email',
        'invitations',
        ['email'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )
    op.create_index('ix_invitations_email_status', 'invitations', ['email', 'status'], unique=False)

    op.create_table('verification_codes',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('code', sa.String(length=12), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('failed_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("type IN ('EMAIL_VERIFICATION', 'LOGIN')", name='ck_verification_codes_type'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_verification_codes_user_type_created',
        'verification_codes',
        ['user_id', 'type', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    """Drop verification_codes and invitations tables."""
    op.drop_index('ix_verification_codes_user_type_created', table_name='verification_codes')
    op.drop_table('verification_codes')
    op.drop_index('ix_invitations_email_status', table_name='invitations')
    op.drop_index('uq_invitations_pending_email', table_name='invitations')
    op.drop_table('invitations')
