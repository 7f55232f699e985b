"""
Uniform result type returned by the repositories.

Repositories never let a ``SQLAlchemyError`` escape. They roll back, log,
and hand back a ``DbResult`` carrying either the value or a
``DataAccessError``; handlers turn failures into HTTP statuses the same
way everywhere via ``unwrap``.
"""

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backend.app.core.exceptions import DataAccessError

T = TypeVar("T")

logger = logging.getLogger("tripcircle.db")


@dataclass
class DbResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[DataAccessError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "DbResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DataAccessError) -> "DbResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried DataAccessError."""
        if self.error is not None:
            raise self.error
        return self.value


def db_operation(name: str):
    """
    Decorator for repository coroutines.

    Wraps the return value in ``DbResult.success`` and converts any
    ``SQLAlchemyError`` into ``DbResult.failure`` after rolling back the
    repository's session.

    Usage:
        class TripRepository:
            @db_operation("trip.update")
            async def update_owned(self, ...):
                ...
    """
    def decorator(func: Callable[..., Awaitable[Any]]):
        @wraps(func)
        async def wrapper(self, *args, **kwargs) -> DbResult:
            try:
                return DbResult.success(await func(self, *args, **kwargs))
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.error("Data access failure in %s: %s", name, exc)
                return DbResult.failure(
                    DataAccessError(name, cause=exc, integrity=isinstance(exc, IntegrityError))
                )
        return wrapper
    return decorator
