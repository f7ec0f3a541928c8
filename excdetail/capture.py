from __future__ import annotations

import sys
import traceback
from collections.abc import Iterable
from datetime import datetime, timezone

from .classify import SYSTEM_PREFIXES
from .enrich import enrich
from .frames import extract_frame, select_root_cause
from .introspect import StackIntrospector, TracebackIntrospector
from .logging import logger
from .model import ExceptionDetail, StackFrameDetail

__all__ = ["capture", "cause_of", "error_code", "iter_chain", "type_name"]

default_introspector = TracebackIntrospector()


def capture(
    exc: BaseException | None = None,
    *,
    prefixes: Iterable[str] = SYSTEM_PREFIXES,
    introspector: StackIntrospector | None = None,
) -> ExceptionDetail | None:
    """Capture an exception and its causes as an ExceptionDetail chain.

    Uses the exception currently being handled if none is given, and
    returns None when there is no exception at all. Never raises on
    account of the exception being documented.
    """
    if exc is None:
        exc = sys.exc_info()[1]
    if exc is None:
        return None
    prefixes = frozenset(prefixes)
    introspector = introspector or default_introspector
    # Build innermost cause first so that each node can be frozen with its inner
    detail = None
    for e in reversed(iter_chain(exc)):
        detail = _capture_one(e, detail, prefixes, introspector)
    return detail


def iter_chain(exc: BaseException) -> list[BaseException]:
    """The exception followed by its nested causes, stopping at any repeat."""
    chain = []
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        chain.append(exc)
        exc = cause_of(exc)
    return chain


def cause_of(exc: BaseException) -> BaseException | None:
    """The exception this one was raised from or while handling, as Python shows it."""
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def error_code(exc: BaseException) -> str:
    """Short token for cross-referencing logs; not guaranteed unique."""
    try:
        value = hash(exc)
    except TypeError:  # __eq__ without __hash__
        value = id(exc)
    return f"E{value & 0xFFFFFFFF:08X}"


def type_name(exc: BaseException) -> str:
    cls = type(exc)
    module = getattr(cls, "__module__", None)
    if not module or module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def _capture_one(
    exc: BaseException,
    inner: ExceptionDetail | None,
    prefixes: frozenset[str],
    introspector: StackIntrospector,
) -> ExceptionDetail:
    frames = _extract_frames(exc, prefixes, introspector)
    detail = ExceptionDetail(
        message=_message(exc),
        exception_type=type_name(exc),
        timestamp=datetime.now(timezone.utc),
        error_code=error_code(exc),
        source=_source(exc),
        stack_trace=_stack_text(exc),
        frames=frames,
        inner_exception=inner,
        root_cause=select_root_cause(frames),
    )
    enrich(detail, exc)
    return detail


def _extract_frames(
    exc: BaseException, prefixes: frozenset[str], introspector: StackIntrospector
) -> tuple[StackFrameDetail, ...]:
    frames = []
    try:
        for descriptor in introspector.frames(exc):
            frames.append(extract_frame(descriptor, prefixes))
    except Exception:
        # Keep whatever was resolved before the failure
        logger.exception("Error extracting traceback")
    return tuple(frames)


def _message(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        logger.debug("str() failed on %s", type(exc).__qualname__, exc_info=True)
        return f"<unprintable {type(exc).__qualname__} object>"


def _source(exc: BaseException) -> str | None:
    """Module where the exception was raised (the innermost traceback frame)."""
    tb = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_globals.get("__name__")


def _stack_text(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    try:
        return "".join(traceback.format_tb(exc.__traceback__))
    except Exception:
        logger.debug("Unable to format raw stack text", exc_info=True)
        return None
