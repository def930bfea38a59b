import logging
from enum import Enum
from typing import Type
from sqlalchemy.exc import IntegrityError
from .base import RepositoryError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Constraint-specific exceptions (internal labels, never raised to callers)
# =================================================================================================================


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations."""


class UniqueConstraintError(ConstraintViolationError):
    """Unique constraint / duplicate value."""


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation (missing required field)."""


class ForeignKeyConstraintError(ConstraintViolationError):
    """Foreign key constraint violated, e.g. an assignment for a deleted campaign."""


class CheckConstraintError(ConstraintViolationError):
    """CHECK constraint violated."""


class UnknownIntegrityError(ConstraintViolationError):
    """Unrecognized integrity error."""


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullConstraintError,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ForeignKeyConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckConstraintError,
}

# Lowercased message fragments used when no SQLSTATE is available (SQLite)
_MESSAGE_KEYWORDS: list[tuple[Type[ConstraintViolationError], tuple[str, ...]]] = [
    (UniqueConstraintError, ("unique constraint", "unique failed", "duplicate")),
    (NotNullConstraintError, ("not null constraint", "null value in column")),
    (ForeignKeyConstraintError, ("foreign key",)),
    (CheckConstraintError, ("check constraint",)),
]


def _pgcode(orig) -> str | None:
    # psycopg 3 exposes `sqlstate`; psycopg2 exposes `pgcode`
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify a SQLAlchemy IntegrityError into a ConstraintViolationError subclass.

    Returns:
        (ExceptionClass, constraint_name or None)
    """
    orig = exc.orig

    pgcode = _pgcode(orig)
    if pgcode:
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", None) if diag else None
        exception_class = PGCODE_EXCEPTION_MAP.get(pgcode)
        if exception_class is None:
            logger.warning(
                "integrity.unknown_pgcode",
                extra={"pgcode": pgcode, "constraint_name": constraint_name},
            )
            return UnknownIntegrityError, constraint_name
        logger.debug("integrity.postgres_diag", extra={"pgcode": pgcode, "constraint_name": constraint_name})
        return exception_class, constraint_name

    normalized = str(orig).lower()
    for exception_class, keywords in _MESSAGE_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return exception_class, None

    logger.warning("integrity.unknown_message", extra={"message_snippet": normalized[:200]})
    return UnknownIntegrityError, None
