"""add interview history, profile, badge, goal, revision question and quiz snapshot tables

Revision ID: add_progress_tables_20261019
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "add_progress_tables_20261019"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "interview_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_seconds", sa.Float(), nullable=True),
        sa.Column("score_rating", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("data_reference", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_interview_history_user_id"), "interview_history", ["user_id"], unique=False)
    op.create_index(op.f("ix_interview_history_type"), "interview_history", ["type"], unique=False)
    op.create_index(op.f("ix_interview_history_timestamp"), "interview_history", ["timestamp"], unique=False)

    op.create_table(
        "user_profile",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False),
        sa.Column("last_activity_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "earned_badge",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("badge_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.String(length=512), nullable=False),
        sa.Column("icon", sa.String(length=64), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "badge_id", name="uq_earned_badge_user_badge"),
    )
    op.create_index(op.f("ix_earned_badge_user_id"), "earned_badge", ["user_id"], unique=False)

    op.create_table(
        "user_goal",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("topic", sa.String(length=64), nullable=False),
        sa.Column("target_accuracy", sa.Float(), nullable=False),
        sa.Column("initial_accuracy", sa.Float(), nullable=False),
        sa.Column("current_accuracy", sa.Float(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_goal_user_id"), "user_goal", ["user_id"], unique=False)
    op.create_index(op.f("ix_user_goal_is_active"), "user_goal", ["is_active"], unique=False)

    op.create_table(
        "revision_question",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("question", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("quiz_topic", sa.String(length=128), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_revision_question_user_id"), "revision_question", ["user_id"], unique=False)
    op.create_index(op.f("ix_revision_question_timestamp"), "revision_question", ["timestamp"], unique=False)

    op.create_table(
        "quiz_snapshot",
        sa.Column("storage_key", sa.String(length=256), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("storage_key"),
    )


def downgrade() -> None:
    op.drop_table("quiz_snapshot")
    op.drop_index(op.f("ix_revision_question_timestamp"), table_name="revision_question")
    op.drop_index(op.f("ix_revision_question_user_id"), table_name="revision_question")
    op.drop_table("revision_question")
    op.drop_index(op.f("ix_user_goal_is_active"), table_name="user_goal")
    op.drop_index(op.f("ix_user_goal_user_id"), table_name="user_goal")
    op.drop_table("user_goal")
    op.drop_index(op.f("ix_earned_badge_user_id"), table_name="earned_badge")
    op.drop_table("earned_badge")
    op.drop_table("user_profile")
    op.drop_index(op.f("ix_interview_history_timestamp"), table_name="interview_history")
    op.drop_index(op.f("ix_interview_history_type"), table_name="interview_history")
    op.drop_index(op.f("ix_interview_history_user_id"), table_name="interview_history")
    op.drop_table("interview_history")
