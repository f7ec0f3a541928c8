"""Stack introspection: turning an exception into frame descriptors.

The capture pipeline only depends on the StackIntrospector protocol; the
default TracebackIntrospector reads Python's own traceback objects.
"""

from __future__ import annotations

import inspect
import itertools
from collections import namedtuple
from collections.abc import Iterable, Iterator
from typing import Any, Protocol

__all__ = [
    "FrameDescriptor",
    "MethodDescriptor",
    "StackIntrospector",
    "TracebackIntrospector",
]

# Raw frame information; file_name None and numbers 0 when unavailable
FrameDescriptor = namedtuple(
    "FrameDescriptor", ["file_name", "line_number", "column_number", "method"]
)

# Resolved method; parameters is a tuple of (type_name, name) pairs
MethodDescriptor = namedtuple(
    "MethodDescriptor", ["name", "declaring_type", "namespace", "parameters"]
)


class StackIntrospector(Protocol):
    def frames(self, exc: BaseException) -> Iterable[FrameDescriptor]: ...


class TracebackIntrospector:
    """Walk exc.__traceback__ from the raising frame out to the catching one."""

    def frames(self, exc: BaseException) -> Iterator[FrameDescriptor]:
        entries = []
        tb = exc.__traceback__
        while tb is not None:
            entries.append(tb)
            tb = tb.tb_next
        # Tracebacks link outermost first; the throw site is reported first
        for tb in reversed(entries):
            frame = tb.tb_frame
            code = frame.f_code
            lineno, column = _position(code, tb.tb_lasti, tb.tb_lineno)
            yield FrameDescriptor(
                _real_filename(code.co_filename),
                lineno,
                column,
                _method(frame),
            )


def _position(code, lasti: int, tb_lineno: int | None) -> tuple[int, int]:
    """Line (1-based) and column (1-based) of the instruction, 0 if unknown."""
    lineno = tb_lineno or 0
    if lasti < 0 or not hasattr(code, "co_positions"):
        return lineno, 0
    positions = next(itertools.islice(code.co_positions(), lasti // 2, None), None)
    if not positions:
        return lineno, 0
    start_line, _, start_col, _ = positions
    # co_positions columns are 0-based
    return start_line or lineno, start_col + 1 if start_col is not None else 0


def _real_filename(filename: str | None) -> str | None:
    # Pseudo files like <string> or <frozen runpy> have no source on disk
    if not filename or (filename.startswith("<") and filename.endswith(">")):
        return None
    return filename


def _method(frame) -> MethodDescriptor:
    code = frame.f_code
    namespace = frame.f_globals.get("__name__") or ""
    return MethodDescriptor(
        code.co_name,
        _declaring_type(frame, namespace),
        namespace,
        _parameters(frame),
    )


def _declaring_type(frame, namespace: str) -> str:
    """Full name of the class defining the code, or the module for functions."""
    code = frame.f_code
    qualname = getattr(code, "co_qualname", None)
    if qualname:
        # Drop the function itself and any nested function scopes
        parts = qualname.split(".")[:-1]
        owner = [p for p in parts if p != "<locals>"]
        if owner and parts[-1] != "<locals>":
            return ".".join([namespace, *owner]) if namespace else ".".join(owner)
        return namespace
    # Python < 3.11: guess the class from self/cls like tracebacks do
    for name in ("self", "cls"):
        value = frame.f_locals.get(name)
        if value is None:
            continue
        cls = value if name == "cls" and inspect.isclass(value) else type(value)
        if getattr(cls, code.co_name, None) is not None:
            return f"{cls.__module__}.{cls.__qualname__}"
    return namespace


def _parameters(frame) -> tuple[tuple[str, str], ...]:
    code = frame.f_code
    count = code.co_argcount + code.co_kwonlyargcount
    if code.co_flags & inspect.CO_VARARGS:
        count += 1
    if code.co_flags & inspect.CO_VARKEYWORDS:
        count += 1
    names = code.co_varnames[:count]
    local_vars = frame.f_locals
    return tuple((_type_name(local_vars, name), name) for name in names)


def _type_name(local_vars: dict[str, Any], name: str) -> str:
    if name not in local_vars:
        return "object"
    return type(local_vars[name]).__name__
