"""add grading totals to submissions

Revision ID: 8d41f0a6c2e7
Revises: 3b7e2c91d4a0
Create Date: 2026-10-20 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d41f0a6c2e7"
down_revision: str | Sequence[str] | None = "3b7e2c91d4a0"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "submissions",
        sa.Column("totals_json", postgresql.JSONB(), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("submissions", "totals_json")
