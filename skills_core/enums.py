"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class AccountType(str, enum.Enum):
    cartorio = "cartorio"
    admin = "admin"


class QuizTier(str, enum.Enum):
    aula = "aula"  # lesson-scoped quiz
    bronze = "bronze"
    prata = "prata"


class TrackStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"


class LessonState(str, enum.Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"


class RoadmapStatus(str, enum.Enum):
    completed = "completed"
    pending = "pending"
    locked = "locked"


# =====================================================
# SQLAlchemy Enum Types
# These reference PostgreSQL types created by the migrations (create_type=False)
# =====================================================

account_type_enum = SQLEnum(
    AccountType, name="account_type", create_type=False, native_enum=True
)
quiz_tier_enum = SQLEnum(QuizTier, name="quiz_tier", create_type=False, native_enum=True)
track_status_enum = SQLEnum(
    TrackStatus, name="track_status", create_type=False, native_enum=True
)
