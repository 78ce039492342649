"""Add event query indexes

Revision ID: 8a527c529db1
Revises: a3a38d9091b1
Create Date: 2026-10-15 19:42:33.921788

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8a527c529db1'
down_revision: Union[str, Sequence[str], None] = 'a3a38d9091b1'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    # Composite indexes for the windowed category queries
    op.create_index('idx_events_category_created', 'events', ['event_category_id', 'created_at'], if_not_exists=True)
    op.create_index('idx_events_user_created', 'events', ['user_id', 'created_at'], if_not_exists=True)


def downgrade():
    op.drop_index('idx_events_user_created', 'events')
    op.drop_index('idx_events_category_created', 'events')
