"""Create participation record and audit tables.

Revision ID: 0001_participation_records
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_participation_records"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "participation_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("event_id", sa.String(length=64), nullable=False),
        sa.Column("subject_id", sa.String(length=64), nullable=True),
        sa.Column("signals", sa.Text(), nullable=False),
        sa.Column("canonical_status", sa.String(length=32), nullable=False),
        sa.Column("last_reconciled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reconciliation_version", sa.Integer(), nullable=False),
        sa.Column("confidence_score", sa.Integer(), nullable=False),
        sa.Column("conflicts", sa.Text(), nullable=False),
        sa.Column("resolution_strategy", sa.String(length=32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("has_conflicts", sa.Boolean(), nullable=False),
        sa.Column("requires_manual_review", sa.Boolean(), nullable=False),
        sa.Column("is_suspicious", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_registered", sa.Boolean(), nullable=False),
        sa.Column("has_attendance", sa.Boolean(), nullable=False),
        sa.Column("has_certificate", sa.Boolean(), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False),
        sa.Column("is_overridden", sa.Boolean(), nullable=False),
        sa.Column("overridden_by", sa.String(length=64), nullable=True),
        sa.Column("overridden_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("override_reason", sa.Text(), nullable=False),
        sa.Column("previous_status", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participation_record")),
        sa.UniqueConstraint(
            "email",
            "event_id",
            name=op.f("uq_participation_record_email"),
        ),
    )
    with op.batch_alter_table("participation_record") as batch_op:
        batch_op.create_index("ix_participation_record_canonical_status", ["canonical_status"])
        batch_op.create_index(
            "ix_participation_record_requires_manual_review",
            ["requires_manual_review"],
        )
        batch_op.create_index("ix_participation_record_is_suspicious", ["is_suspicious"])
        batch_op.create_index(
            "ix_participation_record_event_id_canonical_status",
            ["event_id", "canonical_status"],
        )

    op.create_table(
        "participation_audit",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("event_id", sa.String(length=64), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("strategy", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("previous_status", sa.String(length=32), nullable=True),
        sa.Column("confidence_score", sa.Integer(), nullable=False),
        sa.Column("actor", sa.String(length=64), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("signals", sa.Text(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participation_audit")),
    )
    with op.batch_alter_table("participation_audit") as batch_op:
        batch_op.create_index("ix_participation_audit_email_event_id", ["email", "event_id"])


def downgrade() -> None:
    with op.batch_alter_table("participation_audit") as batch_op:
        batch_op.drop_index("ix_participation_audit_email_event_id")
    op.drop_table("participation_audit")

    with op.batch_alter_table("participation_record") as batch_op:
        batch_op.drop_index("ix_participation_record_event_id_canonical_status")
        batch_op.drop_index("ix_participation_record_is_suspicious")
        batch_op.drop_index("ix_participation_record_requires_manual_review")
        batch_op.drop_index("ix_participation_record_canonical_status")
    op.drop_table("participation_record")
