"""create exam tables

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e2c91d4a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "type",
            sa.String(length=32),
            nullable=False,
            server_default="multiple-choice",
        ),
        sa.Column("options", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("correct_answer", sa.String(length=1), nullable=True),
        sa.Column("score", sa.Float(), nullable=False, server_default="1"),
        sa.Column(
            "difficulty", sa.String(length=16), nullable=False, server_default="medium"
        ),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_questions_course_id", "questions", ["course_id"])

    op.create_table(
        "exam_schedules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("exam_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("class_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "is_closed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_exam_schedules_exam_id", "exam_schedules", ["exam_id"])
    op.create_index("ix_exam_schedules_class_id", "exam_schedules", ["class_id"])

    op.create_table(
        "submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exam_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "answers_json",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("score", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="pending"
        ),
        sa.Column(
            "is_graded", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "exam_id", "student_id", name="uq_submissions_exam_student"
        ),
        sa.UniqueConstraint("exam_id", "user_id", name="uq_submissions_exam_user"),
    )
    op.create_index("ix_submissions_user_id", "submissions", ["user_id"])
    op.create_index("ix_submissions_student_id", "submissions", ["student_id"])
    op.create_index("ix_submissions_exam_id", "submissions", ["exam_id"])
    op.create_index("ix_submissions_status", "submissions", ["status"])

    op.create_table(
        "class_memberships",
        sa.Column("class_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), primary_key=True),
    )
    op.create_index(
        "ix_class_memberships_student_id", "class_memberships", ["student_id"]
    )


def downgrade() -> None:
    op.drop_table("class_memberships")
    op.drop_table("submissions")
    op.drop_table("exam_schedules")
    op.drop_table("questions")
