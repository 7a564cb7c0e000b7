"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

from .enums import account_type_enum, quiz_tier_enum, track_status_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. ACCOUNTS
# =====================================================
accounts = Table(
    "accounts",
    metadata,
    Column("account_id", UUID(as_uuid=True), primary_key=True),
    Column("account_type", account_type_enum, nullable=False),
    Column("owner_id", UUID(as_uuid=True)),  # cartório scope, NULL for admins
    Column("name", Text, nullable=False, server_default=""),
    Column("email", Text),
    Column("active_track_id", UUID(as_uuid=True)),
    Column("is_active", Boolean, server_default="true"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_accounts_owner_id", "owner_id"),
)


# =====================================================
# 2. SYSTEMS -> COURSES -> LESSONS (catalog)
# =====================================================
systems = Table(
    "systems",
    metadata,
    Column("system_id", UUID(as_uuid=True), primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("position", Integer, nullable=False, server_default="0"),
)

courses = Table(
    "courses",
    metadata,
    Column("course_id", UUID(as_uuid=True), primary_key=True),
    Column(
        "system_id",
        UUID(as_uuid=True),
        ForeignKey("systems.system_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("position", Integer, nullable=False, server_default="0"),
    Index("idx_courses_system_id", "system_id"),
)

lessons = Table(
    "lessons",
    metadata,
    Column("lesson_id", UUID(as_uuid=True), primary_key=True),
    Column(
        "course_id",
        UUID(as_uuid=True),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("video_url", Text),
    Column("thumbnail_url", Text),
    Column("position", Integer, nullable=False, server_default="0"),
    Column("required_watch_seconds", Integer, nullable=False, server_default="120"),
    Index("idx_lessons_course_id", "course_id"),
)


# =====================================================
# 3. COMPLETION_RECORDS
# =====================================================
# One row per (lesson, account); written only through upserts
completion_records = Table(
    "completion_records",
    metadata,
    Column("record_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "lesson_id",
        UUID(as_uuid=True),
        ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "account_id",
        UUID(as_uuid=True),
        ForeignKey("accounts.account_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("watched_seconds", Integer, nullable=False, server_default="0"),
    Column("is_complete", Boolean, nullable=False, server_default="false"),
    Column(
        "last_viewed_at",
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    ),
    Column("completed_at", TIMESTAMP(timezone=True)),
    UniqueConstraint(
        "lesson_id", "account_id", name="uq_completion_records_lesson_account"
    ),
    Index("idx_completion_records_account_id", "account_id"),
)


# =====================================================
# 4. TRACKS (trilhas)
# =====================================================
tracks = Table(
    "tracks",
    metadata,
    Column("track_id", UUID(as_uuid=True), primary_key=True),
    Column(
        "course_id",
        UUID(as_uuid=True),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
)

track_lessons = Table(
    "track_lessons",
    metadata,
    Column(
        "track_id",
        UUID(as_uuid=True),
        ForeignKey("tracks.track_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "lesson_id",
        UUID(as_uuid=True),
        ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("position", Integer, nullable=False, server_default="0"),
    UniqueConstraint("track_id", "lesson_id", name="uq_track_lessons_track_lesson"),
)

track_progress = Table(
    "track_progress",
    metadata,
    Column("progress_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "account_id",
        UUID(as_uuid=True),
        ForeignKey("accounts.account_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "track_id",
        UUID(as_uuid=True),
        ForeignKey("tracks.track_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("status", track_status_enum, nullable=False, server_default="in_progress"),
    Column("completed_at", TIMESTAMP(timezone=True)),
    UniqueConstraint("account_id", "track_id", name="uq_track_progress_account_track"),
)


# =====================================================
# 5. QUIZZES
# =====================================================
quizzes = Table(
    "quizzes",
    metadata,
    Column("quiz_id", UUID(as_uuid=True), primary_key=True),
    Column("tier", quiz_tier_enum, nullable=False),
    # Scope: lesson quizzes ('aula') set lesson_id, certification tiers set track_id
    Column(
        "lesson_id",
        UUID(as_uuid=True),
        ForeignKey("lessons.lesson_id", ondelete="CASCADE"),
    ),
    Column(
        "track_id",
        UUID(as_uuid=True),
        ForeignKey("tracks.track_id", ondelete="CASCADE"),
    ),
    Column("title", Text, nullable=False, server_default=""),
    Column("passing_correct_count", Integer, nullable=False),
    Column("questions_to_show", Integer),  # NULL = show all
    Index("idx_quizzes_lesson_id", "lesson_id"),
    Index("idx_quizzes_track_tier", "track_id", "tier"),
)

quiz_questions = Table(
    "quiz_questions",
    metadata,
    Column("question_id", UUID(as_uuid=True), primary_key=True),
    Column(
        "quiz_id",
        UUID(as_uuid=True),
        ForeignKey("quizzes.quiz_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("prompt", Text, nullable=False),
    Column("options", JSONB, server_default=text("'[]'::jsonb"), nullable=False),
    Column("correct_answer", JSONB, nullable=False),
    Column("position", Integer, nullable=False, server_default="0"),
    Index("idx_quiz_questions_quiz_id", "quiz_id"),
)

# Append-only: every submission is a new row
quiz_attempts = Table(
    "quiz_attempts",
    metadata,
    Column("attempt_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "account_id",
        UUID(as_uuid=True),
        ForeignKey("accounts.account_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "quiz_id",
        UUID(as_uuid=True),
        ForeignKey("quizzes.quiz_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("track_id", UUID(as_uuid=True)),
    Column("score", Float, nullable=False),
    Column("passed", Boolean, nullable=False),
    Column("answers", JSONB, server_default=text("'[]'::jsonb"), nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_quiz_attempts_account_quiz", "account_id", "quiz_id"),
)


# =====================================================
# 6. ACCOUNT_SESSIONS (heartbeat liveness)
# =====================================================
account_sessions = Table(
    "account_sessions",
    metadata,
    Column(
        "account_id",
        UUID(as_uuid=True),
        ForeignKey("accounts.account_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "last_seen_at",
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    ),
)
