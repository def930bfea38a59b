"""
Base repository providing the generic operations shared by model repositories.

Repositories flush but never commit; the caller (service or api wrapper) owns
the transaction boundary.
"""
import time
import logging
from typing import TypeVar, Generic, Type, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conversation_engine.database.base import Base
from conversation_engine.exceptions.base import RepositoryError, InvalidFieldError
from conversation_engine.exceptions.mapper import db_error_handler
from conversation_engine.validators.exception_validators import find_unknown_model_kwargs, get_required_columns

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model class and one AsyncSession.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, **kwargs) -> ModelType:
        """
        Validate `kwargs` against the model, insert the row and flush so the
        generated id is available.

        Raises:
            InvalidFieldError: unknown field names.
            RepositoryError: missing required fields, or a mapped database error.
        """
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "provided_keys": sorted(kwargs.keys()),
            },
        )

        unknown = find_unknown_model_kwargs(self.model, kwargs)
        if unknown:
            logger.info(
                "repo.create.invalid_fields",
                extra={"model": self.model.__name__, "invalid_fields": sorted(unknown)},
            )
            raise InvalidFieldError(f"Unknown field(s) for {self.model.__name__}: {', '.join(unknown)}", fields=unknown)

        # NOT NULL columns count as missing when passed as None
        missing = [c for c in get_required_columns(self.model) if kwargs.get(c) is None]
        if missing:
            logger.info(
                "repo.create.missing_required",
                extra={"model": self.model.__name__, "missing_fields": sorted(missing)},
            )
            raise RepositoryError(f"Missing required field(s): {', '.join(missing)} for {self.model.__name__}", fields=missing)

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model.__name__):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def find_one_by(self, **criteria: Any) -> ModelType | None:
        """
        Return the first entity (lowest id) matching every `field=value` pair, or None.

        Raises:
            InvalidFieldError: a criterion names a field the model does not have.
            RepositoryError: the query fails.
        """
        unknown = find_unknown_model_kwargs(self.model, criteria)
        if unknown:
            raise InvalidFieldError(f"{self.model.__name__} has no field(s): {', '.join(unknown)}", fields=unknown)

        stmt = select(self.model)
        for field, value in criteria.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        stmt = stmt.order_by(self.model.id).limit(1)

        try:
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            logger.error(
                "repo.find_one_by.failed",
                extra={"model": self.model.__name__, "criteria": sorted(criteria), "error": str(e)},
            )
            raise RepositoryError(f"Failed to find {self.model.__name__}") from e
