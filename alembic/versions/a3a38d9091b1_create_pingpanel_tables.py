"""Create users, event categories, events and quotas

Revision ID: a3a38d9091b1
Revises:
Create Date: 2026-10-12 10:14:02.417391

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a3a38d9091b1'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

plan = sa.Enum('FREE', 'PRO', name='plan')
delivery_status = sa.Enum('PENDING', 'DELIVERED', 'FAILED', name='delivery_status')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('external_id', sa.String(), nullable=True, unique=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('api_key', sa.String(), nullable=False, unique=True),
        sa.Column('webhook_url', sa.String(), nullable=True),
        sa.Column('quota_limit', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('plan', plan, nullable=False, server_default='FREE'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'event_categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('color', sa.Integer(), nullable=False),
        sa.Column('emoji', sa.String(), nullable=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('name', 'user_id', name='uq_event_categories_name_user'),
    )
    op.create_index('ix_event_categories_user_id', 'event_categories', ['user_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('formatted_message', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('fields', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('delivery_status', delivery_status, nullable=False, server_default='PENDING'),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'event_category_id',
            sa.Uuid(),
            sa.ForeignKey('event_categories.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'quotas',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'year', 'month', name='uq_quotas_user_month'),
    )


def downgrade():
    op.drop_table('quotas')
    op.drop_table('events')
    op.drop_index('ix_event_categories_user_id', 'event_categories')
    op.drop_table('event_categories')
    op.drop_table('users')
    delivery_status.drop(op.get_bind(), checkfirst=True)
    plan.drop(op.get_bind(), checkfirst=True)
