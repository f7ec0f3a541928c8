from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from .classify import SYSTEM_PREFIXES, is_user_code
from .introspect import FrameDescriptor
from .logging import logger
from .model import StackFrameDetail

__all__ = ["extract_frame", "format_parameters", "select_root_cause"]


def format_parameters(parameters: Iterable[tuple[str, str]]) -> str:
    """Join (type_name, name) pairs as "type name, type name"."""
    return ", ".join(f"{typename} {name}" for typename, name in parameters)


def extract_frame(
    descriptor: FrameDescriptor, prefixes: Iterable[str] = SYSTEM_PREFIXES
) -> StackFrameDetail:
    """Build a StackFrameDetail from a FrameDescriptor.

    Missing information becomes None/empty/0. A frame without a resolvable
    method has an empty class name and thus counts as user code.
    """
    file_name = getattr(descriptor, "file_name", None) or None
    line_number = _nonnegative(getattr(descriptor, "line_number", 0))
    column_number = _nonnegative(getattr(descriptor, "column_number", 0))
    method = getattr(descriptor, "method", None)

    method_name = None
    class_name = namespace = parameters = ""
    if method is not None:
        try:
            method_name = method.name or None
            class_name = method.declaring_type or ""
            namespace = method.namespace or ""
            parameters = format_parameters(method.parameters or ())
        except Exception:
            logger.debug("Unresolvable method descriptor %r", method, exc_info=True)
            method_name = None
            class_name = namespace = parameters = ""

    return StackFrameDetail(
        file_name=file_name,
        line_number=line_number,
        column_number=column_number,
        method_name=method_name,
        class_name=class_name,
        parameters=parameters,
        is_user_code=is_user_code(class_name, prefixes),
        namespace=namespace,
    )


def _nonnegative(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def select_root_cause(frames: Sequence[StackFrameDetail]) -> StackFrameDetail | None:
    """First user code frame with a known file, else the first frame."""
    for frame in frames:
        if frame.is_user_code and frame.file_name:
            return frame
    return frames[0] if frames else None
