"""Plain text rendering of captured exception details.

The section headers and line labels are stable so that log processors can
parse the output.
"""

from __future__ import annotations

from .model import ExceptionDetail

__all__ = [
    "TIMESTAMP_FORMAT",
    "format_detail",
    "format_levels",
    "format_root_cause",
    "format_timestamp",
]

# Milliseconds are appended separately (strftime only knows microseconds)
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(detail: ExceptionDetail) -> str:
    ts = detail.timestamp
    return f"{ts.strftime(TIMESTAMP_FORMAT)}.{ts.microsecond // 1000:03d}"


def format_detail(detail: ExceptionDetail | None, include_frames: bool = True) -> str:
    """Render a detail and its inner exceptions as a text report."""
    if detail is None:
        return ""
    # Each inner report is nested at the end of its parent, followed by a newline
    parts = [_format_level(d, include_frames) for d in detail.chain()]
    return "\n=== Inner Exception ===\n".join(parts) + "\n" * (len(parts) - 1)


def _format_level(detail: ExceptionDetail, include_frames: bool) -> str:
    lines = [
        "=== Exception Details ===",
        f"Error Code: {detail.error_code}",
        f"Type: {detail.exception_type}",
        f"Message: {detail.message}",
        f"Timestamp: {format_timestamp(detail)}",
    ]

    root = detail.root_cause
    if root is not None:
        lines += [
            "",
            "=== Root Cause ===",
            f"File: {root.file_name or ''}",
            f"Line: {root.line_number}",
            f"Method: {root.qualified_method}",
        ]

    if include_frames and detail.frames:
        lines += ["", "=== Stack Trace ==="]
        for frame in detail.frames:
            tag = "[User Code]" if frame.is_user_code else "[System]"
            lines.append(f"{tag} {frame.qualified_method}")
            if frame.file_name:
                lines.append(f"  at {frame.file_name}:line {frame.line_number}")

    if detail.additional_data:
        lines += ["", "=== Additional Information ==="]
        lines += [f"{k}: {v}" for k, v in detail.additional_data.items()]

    return "".join(f"{line}\n" for line in lines)


def format_root_cause(detail: ExceptionDetail | None) -> str:
    """Short summary of where the error most likely originated."""
    if detail is None or detail.root_cause is None:
        return ""
    root = detail.root_cause
    return (
        "Main Caused Error:\n"
        f"File: {root.file_name or ''}\n"
        f"Line: {root.line_number}\n"
        f"Method: {root.qualified_method}\n"
    )


def format_levels(detail: ExceptionDetail | None) -> str:
    """Messages and raw stack text of each chain level, outermost as level 0."""
    if detail is None:
        return ""
    blocks = []
    for level, d in enumerate(detail.chain()):
        blocks.append(
            f"Level ({level}) Message: {d.message}\n"
            f"Level ({level}) StackTrace: {(d.stack_trace or '').rstrip()}\n"
        )
    return "\n".join(blocks)
