"""initial courses, scos, attempts and cmi_values tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("org_identifier", sa.String(length=255), nullable=True),
        sa.Column("launch_href", sa.Text(), nullable=False),
        sa.Column("base_path", sa.Text(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False,
        ),
    )
    op.create_table(
        "scos",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(length=36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column(
            "position", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("launch_href", sa.Text(), nullable=False),
        sa.Column("parameters", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False,
        ),
    )
    op.create_index("ix_scos_course_id", "scos", ["course_id"])
    op.create_table(
        "attempts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(length=36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("learner_id", sa.String(length=255), nullable=False),
        sa.Column(
            "sco_id",
            sa.String(length=36),
            sa.ForeignKey("scos.id"),
            nullable=True,
        ),
        sa.Column(
            "status", sa.String(length=32), nullable=False,
            server_default="not_started",
        ),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False,
        ),
    )
    op.create_index("ix_attempts_course_id", "attempts", ["course_id"])
    op.create_index(
        "ix_attempts_course_learner", "attempts", ["course_id", "learner_id"]
    )
    op.create_table(
        "cmi_values",
        sa.Column(
            "attempt_id",
            sa.String(length=36),
            sa.ForeignKey("attempts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("element", sa.String(length=255), primary_key=True),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column(
            "updated_at", sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("cmi_values")
    op.drop_index("ix_attempts_course_learner", table_name="attempts")
    op.drop_index("ix_attempts_course_id", table_name="attempts")
    op.drop_table("attempts")
    op.drop_index("ix_scos_course_id", table_name="scos")
    op.drop_table("scos")
    op.drop_table("courses")
