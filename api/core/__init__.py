"""Cross-cutting pieces shared by every layer: config, database, errors, logging.

Common imports:
    from core import get_logger, AppError, NotFoundError
"""

from core.errors import AppError, ErrorCode, ErrorKind, NotFoundError, PersistenceError
from core.logger import bind_contextvars, clear_contextvars, get_logger

__all__ = [
    "AppError",
    "ErrorCode",
    "ErrorKind",
    "NotFoundError",
    "PersistenceError",
    "bind_contextvars",
    "clear_contextvars",
    "get_logger",
]
