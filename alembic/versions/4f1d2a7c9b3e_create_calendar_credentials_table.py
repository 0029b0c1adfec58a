"""create calendar_credentials table

Revision ID: 4f1d2a7c9b3e
Revises:
Create Date: 2026-10-19 09:00:00.000000

Stores the single Google Calendar credential of the household dashboard:
refresh token, current access token and its expiry. The row is keyed by
a fixed id (1) and updated in place on every refresh or re-authorization.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1d2a7c9b3e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the calendar_credentials table."""
    op.create_table(
        'calendar_credentials',
        # Primary key (always 1)
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),

        # Token data
        sa.Column('refresh_token', sa.Text(), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),

        # Timestamps
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),

        # Constraints
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Drop the calendar_credentials table."""
    op.drop_table('calendar_credentials')
