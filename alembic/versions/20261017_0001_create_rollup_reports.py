"""create rollup_reports table

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:10:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "rollup_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_rows", sa.Integer(), nullable=False),
        sa.Column("column_count", sa.Integer(), nullable=False),
        sa.Column(
            "rollups_json",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Per-column count/sum/min/max/avg",
        ),
        sa.Column("headers_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("file_meta_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_rollup_reports"),
    )
    op.create_index("ix_rollup_reports_file_name", "rollup_reports", ["file_name"], unique=False)
    op.create_index("ix_rollup_reports_created_at", "rollup_reports", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rollup_reports_created_at", table_name="rollup_reports")
    op.drop_index("ix_rollup_reports_file_name", table_name="rollup_reports")
    op.drop_table("rollup_reports")
