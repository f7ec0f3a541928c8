"""Environment and error category annotations for captured details.

CATEGORIES is an ordered list of (predicate, builder) pairs. The first
predicate that accepts the exception has its builder's keys merged into
additional_data. Use register_category() to add more.
"""

from __future__ import annotations

import os
import platform
import sqlite3
from functools import lru_cache
from typing import Callable

from .logging import logger
from .model import ExceptionDetail

__all__ = ["CATEGORIES", "enrich", "register_category", "environment"]

Predicate = Callable[[BaseException], bool]
Builder = Callable[[BaseException], "dict[str, str]"]


@lru_cache(maxsize=1)
def _host() -> tuple[str, str]:
    return platform.node(), platform.platform()


def environment() -> dict[str, str]:
    """Host information attached to every detail."""
    machine, os_version = _host()
    # Not cached, the pid changes across fork
    return {
        "MachineName": machine,
        "OSVersion": os_version,
        "ProcessId": str(os.getpid()),
    }


def _is_io_error(e: BaseException) -> bool:
    return isinstance(e, OSError)


def _io_data(e: BaseException) -> dict[str, str]:
    return {"ErrorType": "IO Error"}


def _is_database_error(e: BaseException) -> bool:
    if isinstance(e, sqlite3.Error):
        return True
    # PEP 249 drivers all define a DatabaseError class
    return any(cls.__name__ == "DatabaseError" for cls in type(e).__mro__)


def _vendor_error_number(e: BaseException) -> int:
    for attr in ("sqlite_errorcode", "errno", "number"):
        value = getattr(e, attr, None)
        if isinstance(value, int):
            return value
    # MySQL drivers pass (code, message) as args
    if e.args and isinstance(e.args[0], int):
        return e.args[0]
    return 0


def _database_data(e: BaseException) -> dict[str, str]:
    return {
        "ErrorType": "Database Error",
        "SqlErrorNumber": str(_vendor_error_number(e)),
    }


CATEGORIES: list[tuple[Predicate, Builder]] = [
    (_is_io_error, _io_data),
    (_is_database_error, _database_data),
]


def register_category(predicate: Predicate, builder: Builder) -> None:
    """Append a category, evaluated after the existing ones."""
    CATEGORIES.append((predicate, builder))


def enrich(detail: ExceptionDetail, exc: BaseException) -> None:
    """Fill detail.additional_data. Only called while a detail is being built."""
    data = detail.additional_data
    try:
        data.update(environment())
    except Exception:
        logger.exception("Unable to read host information")
    for predicate, builder in CATEGORIES:
        try:
            if not predicate(exc):
                continue
            data.update({str(k): str(v) for k, v in builder(exc).items()})
        except Exception:
            name = getattr(builder, "__name__", builder)
            logger.exception("Error category %r failed", name)
            continue
        break
