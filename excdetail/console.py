"""Writing reports to streams, logging records and sys.excepthook."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

from .capture import capture
from .text import format_detail

__all__ = ["DetailFormatter", "load", "print_detail", "unload"]

_original_excepthook = None


def print_detail(
    exc: BaseException | None = None,
    *,
    file: TextIO | None = None,
    include_frames: bool = True,
    **capture_args: Any,
) -> None:
    """Capture an exception (default: the one being handled) and print the report."""
    detail = capture(exc, **capture_args)
    if detail is None:
        return
    if file is None:
        file = sys.stderr
    file.write(format_detail(detail, include_frames))
    file.flush()


class DetailFormatter(logging.Formatter):
    """Log formatter that renders exc_info as a captured detail report."""

    def __init__(self, *args: Any, include_frames: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.include_frames = include_frames

    def formatException(self, ei) -> str:
        # capture(None) would pick up whatever exception is being handled
        detail = capture(ei[1]) if ei and ei[1] is not None else None
        if detail is None:
            return super().formatException(ei)
        return format_detail(detail, self.include_frames).rstrip("\n")


def load() -> None:
    """Print a detail report for uncaught exceptions.

    Call unload() to restore the previous sys.excepthook.
    """
    global _original_excepthook

    if _original_excepthook is None:
        _original_excepthook = sys.excepthook
    previous = _original_excepthook

    def _excdetail_excepthook(exc_type, exc_value, exc_tb):
        try:
            print_detail(exc_value)
        except Exception:
            # Fall back to the previous hook on any error
            previous(exc_type, exc_value, exc_tb)

    sys.excepthook = _excdetail_excepthook


def unload() -> None:
    """Restore the excepthook that was active before load()."""
    global _original_excepthook

    if _original_excepthook is not None:
        sys.excepthook = _original_excepthook
        _original_excepthook = None
