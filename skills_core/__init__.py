"""
Core business logic for Siplan Skills - framework-agnostic.
Used by the web API; the services can be driven from any other interface.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Errors
from .errors import (
    SkillsError, DataUnavailable, GateNotSatisfied, PersistenceFailure,
    NotAuthenticated, LessonNotFound, QuizNotFound,
)

# Progress aggregation (pure)
from .aggregation import (
    ProgressSummary, compute_progress, compute_progress_by_course,
    progress_status, round_percent,
)

# Progress reads
from .progress import course_progress, progress_overview

# Lesson completion
from .completion import can_complete, lesson_state, record_progress
from .watch_timer import WatchTimer, format_time

# Quizzes and certification
from .quizzes import (
    GradeResult, grade, select_questions, serve_quiz, submit_attempt,
    check_track_completion,
)
from .certification import CertificationState, derive_certification, compute_certification
from .roadmap import build_roadmap, get_track_roadmap

# Session
from .refresh import ProgressRefresh, ProgressWatcher
from .context import Account, SessionContext
from .heartbeat import send_heartbeat, start_heartbeat

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'is_configured',
    # Errors
    'SkillsError', 'DataUnavailable', 'GateNotSatisfied', 'PersistenceFailure',
    'NotAuthenticated', 'LessonNotFound', 'QuizNotFound',
    # Aggregation
    'ProgressSummary', 'compute_progress', 'compute_progress_by_course',
    'progress_status', 'round_percent',
    # Progress reads
    'course_progress', 'progress_overview',
    # Lesson completion
    'can_complete', 'lesson_state', 'record_progress', 'WatchTimer', 'format_time',
    # Quizzes and certification
    'GradeResult', 'grade', 'select_questions', 'serve_quiz', 'submit_attempt',
    'check_track_completion',
    'CertificationState', 'derive_certification', 'compute_certification',
    'build_roadmap', 'get_track_roadmap',
    # Session
    'ProgressRefresh', 'ProgressWatcher', 'Account', 'SessionContext',
    'send_heartbeat', 'start_heartbeat',
]
