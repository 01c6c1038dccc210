"""Repository utility functions for common database operations."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Concatenate, ParamSpec, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from core.errors import PersistenceError

# Default threshold for logging slow operations (milliseconds)
SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")


class _InstrumentedRepository(Protocol):
    name: str
    logger: Any
    slow_query_threshold_ms: int


S = TypeVar("S", bound=_InstrumentedRepository)


def repository_operation(
    operation_name: str,
) -> Callable[
    [Callable[Concatenate[S, P], Awaitable[R]]],
    Callable[Concatenate[S, P], Awaitable[R]],
]:
    """Decorator for repository methods that touch storage.

    Logs at WARNING for operations exceeding the repository's
    ``slow_query_threshold_ms``. SQLAlchemy exceptions are logged with the
    repository name and operation, then re-raised as ``PersistenceError``
    (original exception chained as ``__cause__``).

    Usage:
        @repository_operation("find_by_id")
        async def find_by_id(self, id: int) -> Property | None:
            ...
    """

    def decorator(
        func: Callable[Concatenate[S, P], Awaitable[R]],
    ) -> Callable[Concatenate[S, P], Awaitable[R]]:
        @wraps(func)
        async def wrapper(self: S, *args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = await func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                self.logger.error(
                    "repository.operation.failed",
                    repository=self.name,
                    operation=operation_name,
                    duration_ms=round(duration_ms, 2),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise PersistenceError(operation_name, self.name) from e

            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms > self.slow_query_threshold_ms:
                self.logger.warning(
                    "repository.slow_query",
                    repository=self.name,
                    operation=operation_name,
                    duration_ms=round(duration_ms, 2),
                )
            return result

        return wrapper

    return decorator
