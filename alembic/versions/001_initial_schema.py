"""Initial schema: accounts, catalog, completion records, tracks and quizzes.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type = ENUM("cartorio", "admin", name="account_type", create_type=False)
quiz_tier = ENUM("aula", "bronze", "prata", name="quiz_tier", create_type=False)
track_status = ENUM("in_progress", "completed", name="track_status", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in (account_type, quiz_tier, track_status):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "accounts",
        sa.Column("account_id", UUID(as_uuid=True), nullable=False),
        sa.Column("account_type", account_type, nullable=False),
        sa.Column("owner_id", UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.Text(), server_default="", nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("active_track_id", UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("account_id", name="pk_accounts"),
    )
    op.create_index("idx_accounts_owner_id", "accounts", ["owner_id"])

    op.create_table(
        "systems",
        sa.Column("system_id", UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("system_id", name="pk_systems"),
    )

    op.create_table(
        "courses",
        sa.Column("course_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "system_id",
            UUID(as_uuid=True),
            sa.ForeignKey("systems.system_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("course_id", name="pk_courses"),
    )
    op.create_index("idx_courses_system_id", "courses", ["system_id"])

    op.create_table(
        "lessons",
        sa.Column("lesson_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "course_id",
            UUID(as_uuid=True),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "required_watch_seconds", sa.Integer(), server_default="120", nullable=False
        ),
        sa.PrimaryKeyConstraint("lesson_id", name="pk_lessons"),
    )
    op.create_index("idx_lessons_course_id", "lessons", ["course_id"])

    op.create_table(
        "completion_records",
        sa.Column("record_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "lesson_id",
            UUID(as_uuid=True),
            sa.ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.account_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("watched_seconds", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_complete", sa.Boolean(), server_default="false", nullable=False),
        sa.Column(
            "last_viewed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("record_id", name="pk_completion_records"),
        sa.UniqueConstraint(
            "lesson_id", "account_id", name="uq_completion_records_lesson_account"
        ),
    )
    op.create_index(
        "idx_completion_records_account_id", "completion_records", ["account_id"]
    )

    op.create_table(
        "tracks",
        sa.Column("track_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "course_id",
            UUID(as_uuid=True),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("track_id", name="pk_tracks"),
    )

    op.create_table(
        "track_lessons",
        sa.Column(
            "track_id",
            UUID(as_uuid=True),
            sa.ForeignKey("tracks.track_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lesson_id",
            UUID(as_uuid=True),
            sa.ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.UniqueConstraint("track_id", "lesson_id", name="uq_track_lessons_track_lesson"),
    )

    op.create_table(
        "track_progress",
        sa.Column("progress_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.account_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "track_id",
            UUID(as_uuid=True),
            sa.ForeignKey("tracks.track_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", track_status, server_default="in_progress", nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("progress_id", name="pk_track_progress"),
        sa.UniqueConstraint(
            "account_id", "track_id", name="uq_track_progress_account_track"
        ),
    )

    op.create_table(
        "quizzes",
        sa.Column("quiz_id", UUID(as_uuid=True), nullable=False),
        sa.Column("tier", quiz_tier, nullable=False),
        sa.Column(
            "lesson_id",
            UUID(as_uuid=True),
            sa.ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "track_id",
            UUID(as_uuid=True),
            sa.ForeignKey("tracks.track_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("title", sa.Text(), server_default="", nullable=False),
        sa.Column("passing_correct_count", sa.Integer(), nullable=False),
        sa.Column("questions_to_show", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("quiz_id", name="pk_quizzes"),
    )
    op.create_index("idx_quizzes_lesson_id", "quizzes", ["lesson_id"])
    op.create_index("idx_quizzes_track_tier", "quizzes", ["track_id", "tier"])

    op.create_table(
        "quiz_questions",
        sa.Column("question_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "quiz_id",
            UUID(as_uuid=True),
            sa.ForeignKey("quizzes.quiz_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column(
            "options", JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False
        ),
        sa.Column("correct_answer", JSONB(), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("question_id", name="pk_quiz_questions"),
    )
    op.create_index("idx_quiz_questions_quiz_id", "quiz_questions", ["quiz_id"])

    op.create_table(
        "quiz_attempts",
        sa.Column("attempt_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.account_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "quiz_id",
            UUID(as_uuid=True),
            sa.ForeignKey("quizzes.quiz_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("track_id", UUID(as_uuid=True), nullable=True),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("passed", sa.Boolean(), nullable=False),
        sa.Column(
            "answers", JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("attempt_id", name="pk_quiz_attempts"),
    )
    op.create_index(
        "idx_quiz_attempts_account_quiz", "quiz_attempts", ["account_id", "quiz_id"]
    )

    op.create_table(
        "account_sessions",
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.account_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "last_seen_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("account_id", name="pk_account_sessions"),
    )


def downgrade() -> None:
    op.drop_table("account_sessions")
    op.drop_index("idx_quiz_attempts_account_quiz", table_name="quiz_attempts")
    op.drop_table("quiz_attempts")
    op.drop_index("idx_quiz_questions_quiz_id", table_name="quiz_questions")
    op.drop_table("quiz_questions")
    op.drop_index("idx_quizzes_track_tier", table_name="quizzes")
    op.drop_index("idx_quizzes_lesson_id", table_name="quizzes")
    op.drop_table("quizzes")
    op.drop_table("track_progress")
    op.drop_table("track_lessons")
    op.drop_table("tracks")
    op.drop_index("idx_completion_records_account_id", table_name="completion_records")
    op.drop_table("completion_records")
    op.drop_index("idx_lessons_course_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("idx_courses_system_id", table_name="courses")
    op.drop_table("courses")
    op.drop_table("systems")
    op.drop_index("idx_accounts_owner_id", table_name="accounts")
    op.drop_table("accounts")

    bind = op.get_bind()
    for enum_type in (track_status, quiz_tier, account_type):
        enum_type.drop(bind, checkfirst=True)
