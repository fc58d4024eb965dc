"""Rollout job state baseline

Revision ID: 20261018_01
Revises: None
Create Date: 2026-10-18
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "job_state",
        sa.Column("job_id", sa.Text(), primary_key=True),
        sa.Column("job_type", sa.Text(), nullable=False),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("job_ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("params", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("stage in ('queued', 'started', 'completed', 'failed')", name="ck_job_state_stage"),
        sa.CheckConstraint("job_type in ('deploy')", name="ck_job_state_job_type"),
    )
    op.create_index("ix_job_state_job_ts", "job_state", ["job_ts"])
    op.create_index("ix_job_state_stage_job_ts", "job_state", ["stage", "job_ts"])

    op.create_table(
        "component_hash",
        sa.Column("component", sa.Text(), primary_key=True),
        sa.Column("build_hash", sa.Text(), nullable=True),
        sa.Column("deploy_hash", sa.Text(), nullable=True),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("component in ('ceramic', 'ipfs', 'cas')", name="ck_component_hash_component"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("component_hash")

    op.drop_index("ix_job_state_stage_job_ts", table_name="job_state")
    op.drop_index("ix_job_state_job_ts", table_name="job_state")
    op.drop_table("job_state")
