from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from conversation_engine.exceptions import DuplicateError, RepositoryError, db_error_handler
from conversation_engine.exceptions.integrity_classifier import (
    ForeignKeyConstraintError,
    UniqueConstraintError,
    UnknownIntegrityError,
    classify_integrity_error,
)


def integrity_error(orig) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, orig)


class TestClassifyIntegrityError:

    def test_postgres_sqlstate(self):
        orig = Exception("duplicate key")
        orig.sqlstate = "23505"
        orig.diag = SimpleNamespace(constraint_name="assignment_user_campaign_key")
        assert classify_integrity_error(integrity_error(orig)) == (
            UniqueConstraintError,
            "assignment_user_campaign_key",
        )

    def test_sqlite_message(self):
        orig = Exception("FOREIGN KEY constraint failed")
        assert classify_integrity_error(integrity_error(orig)) == (ForeignKeyConstraintError, None)

    def test_unknown(self):
        assert classify_integrity_error(integrity_error(Exception("???")))[0] is UnknownIntegrityError


@pytest.mark.asyncio
class TestDbErrorHandler:

    async def test_unique_violation_becomes_duplicate_error(self):
        db = AsyncMock()
        with pytest.raises(DuplicateError):
            async with db_error_handler(db, "Assignment"):
                raise integrity_error(Exception("UNIQUE constraint failed: assignment.id"))
        db.rollback.assert_awaited_once()

    async def test_unexpected_error_is_wrapped(self):
        db = AsyncMock()
        with pytest.raises(RepositoryError) as exc_info:
            async with db_error_handler(db, "CampaignContact"):
                raise RuntimeError("connection reset")
        assert "CampaignContact" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_repository_error_passes_through(self):
        db = AsyncMock()
        original = RepositoryError("already mapped")
        with pytest.raises(RepositoryError) as exc_info:
            async with db_error_handler(db):
                raise original
        assert exc_info.value is original

    async def test_rollback_failure_does_not_mask_the_error(self):
        db = AsyncMock()
        db.rollback.side_effect = RuntimeError("rollback failed")
        with pytest.raises(RepositoryError):
            async with db_error_handler(db, "Assignment"):
                raise RuntimeError("write failed")


def test_payload_omits_constraint():
    err = DuplicateError("Assignment already exists", constraint="assignment_pkey", fields=["id"])
    assert err.to_payload() == {"detail": "Assignment already exists", "code": "duplicate", "fields": ["id"]}
