"""create mapping_presets table

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 09:40:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "mapping_presets",
        sa.Column("key", sa.String(length=255), nullable=False, comment="<namespace>::<preset name>"),
        sa.Column(
            "payload_json",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Saved mapping and the headers it was built from",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_mapping_presets"),
    )


def downgrade() -> None:
    op.drop_table("mapping_presets")
