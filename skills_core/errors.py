"""Error types raised by the progress, quiz and certification services.

The API layer maps these onto HTTP responses (see skills_api/errors.py).
"""


class SkillsError(Exception):
    """Base class for domain errors."""


class DataUnavailable(SkillsError):
    """A read failed because the store could not be reached. Retryable."""


class GateNotSatisfied(SkillsError):
    """A gating rule refused the operation (e.g. watch time not elapsed)."""


class PersistenceFailure(SkillsError):
    """A write failed. Not retried automatically."""


class NotAuthenticated(SkillsError):
    """No account context is available for an account-scoped operation."""


class LessonNotFound(SkillsError, LookupError):
    pass


class QuizNotFound(SkillsError, LookupError):
    pass
