r"""
Map driver-level failures to app-level exceptions.

`classify_integrity_error()` labels what failed in the database; the functions
here turn that label into the `RepositoryError` family the services and
resolvers understand:

| Constraint-level (internal) | App-level (raised)                     |
| --------------------------- | -------------------------------------- |
| `UniqueConstraintError`     | `DuplicateError`                       |
| `NotNullConstraintError`    | `RepositoryError("Missing ...")`       |
| `ForeignKeyConstraintError` | `RepositoryError("... not found ...")` |
| `CheckConstraintError`      | `RepositoryError("Business rule ...")` |
"""
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError

logger = logging.getLogger(__name__)


def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    model_part = model_name or "Record"

    if exc_cls is UniqueConstraintError:
        logger.info("mapper.duplicate_detected", extra={"model": model_part, "constraint": constraint_name})
        raise DuplicateError(f"{model_part} already exists", constraint=constraint_name) from exc

    if exc_cls is NotNullConstraintError:
        logger.info("mapper.not_null_violation", extra={"model": model_part, "constraint": constraint_name})
        raise RepositoryError(f"Missing required field for {model_part}", constraint=constraint_name) from exc

    if exc_cls is ForeignKeyConstraintError:
        logger.info("mapper.foreign_key_violation", extra={"model": model_part, "constraint": constraint_name})
        raise RepositoryError(
            f"{model_part} referenced entity not found", constraint=constraint_name
        ) from exc

    if exc_cls is CheckConstraintError:
        # Raw DB text only at DEBUG
        logger.debug("mapper.check_constraint_failure", extra={"model": model_part, "raw": str(exc.orig)})
        raise RepositoryError(
            f"{model_part} business rule violated (check constraint).", constraint=constraint_name
        ) from exc

    logger.warning("mapper.unknown_integrity_error", extra={"model": model_part, "constraint": constraint_name})
    raise RepositoryError(f"{model_part} database integrity error.") from exc


@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, "CampaignContact"):
            ... DB writes that may raise ...

    Rolls the session back on error and raises a mapped app-level exception.
    `RepositoryError`s raised inside the block pass through unchanged.
    """
    try:
        yield
    except RepositoryError:
        await _safe_rollback(db, model_name)
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, model_name)
        raise_mapped_integrity_error(exc, model_name)
    except Exception as exc:
        await _safe_rollback(db, model_name)
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise RepositoryError(f"Failed to operate on {model_name or 'database'}") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("Failed to rollback session", extra={"model": model_name})
