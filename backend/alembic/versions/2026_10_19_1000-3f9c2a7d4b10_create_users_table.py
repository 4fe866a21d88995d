"""create users table

Revision ID: 3f9c2a7d4b10
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d4b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('ADMIN', 'STAFF', 'USER', name='user_role')
auth_provider = sa.Enum('CREDENTIALS', 'GOOGLE', 'FACEBOOK', 'APPLE', name='auth_provider')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=300), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('first_name', sa.String(length=200), nullable=True),
        sa.Column('last_name', sa.String(length=200), nullable=True),
        sa.Column('phone_country_code', sa.String(length=10), nullable=True),
        sa.Column('date_of_birth', sa.DateTime(timezone=True), nullable=True),
        sa.Column('profile_image_url', sa.Text(), nullable=True),
        sa.Column('provider', auth_provider, server_default='CREDENTIALS', nullable=False),
        sa.Column('provider_id', sa.String(length=100), nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_phone_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('two_factor_enabled', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('two_factor_secret', sa.Text(), nullable=True),
        sa.Column('role', user_role, server_default='USER', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('uq_users_email_lower', 'users', [sa.text('lower(email)')], unique=True)
    op.create_index('uq_users_phone_number_lower', 'users', [sa.text('lower(phone_number)')], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_users_created_at', table_name='users')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('uq_users_phone_number_lower', table_name='users')
    op.drop_index('uq_users_email_lower', table_name='users')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)
    auth_provider.drop(op.get_bind(), checkfirst=True)
