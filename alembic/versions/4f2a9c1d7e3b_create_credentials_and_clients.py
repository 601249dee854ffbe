"""create_credentials_and_clients

Revision ID: 4f2a9c1d7e3b
Revises:
Create Date: 2025-09-12 10:05:41.218733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e3b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.Text().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'credentials',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('service', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_credentials_service_published', 'credentials', ['service', 'published_at'])

    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=False),
        sa.Column('client_name', sa.String(length=200), nullable=True),
        # JSON list, or a legacy single / comma-joined / plus-joined string
        sa.Column('subscriptions', json_type, nullable=True),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_debtor', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_contacted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('manual_credentials', json_type, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_phone_number', 'clients', ['phone_number'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_clients_phone_number', table_name='clients')
    op.drop_table('clients')
    op.drop_index('ix_credentials_service_published', table_name='credentials')
    op.drop_table('credentials')
