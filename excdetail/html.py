from __future__ import annotations

from typing import Any

from html5tagger import E  # type: ignore[import]

from .model import ExceptionDetail
from .text import format_timestamp

__all__ = ["html_detail"]


def html_detail(detail: ExceptionDetail | None, include_frames: bool = True) -> Any:
    """Render a detail chain as an HTML fragment with the text report's sections."""
    if detail is None:
        return ""
    with E.div(class_="excdetail") as doc:
        chain = detail.chain()
        for depth, d in enumerate(chain):
            if depth:
                doc.h2("Inner Exception", class_="inner-exception")
            with doc.div(class_="exception-detail", id=f"exc-{d.error_code}"):
                _render_level(doc, d, include_frames)
    return doc


def _render_level(doc: Any, detail: ExceptionDetail, include_frames: bool) -> None:
    doc.h2("Exception Details")
    with doc.table(class_="exception-header"):
        for label, value in (
            ("Error Code", detail.error_code),
            ("Type", detail.exception_type),
            ("Message", detail.message),
            ("Timestamp", format_timestamp(detail)),
        ):
            with doc.tr:
                doc.th(label)
                doc.td(value)

    root = detail.root_cause
    if root is not None:
        doc.h3("Root Cause")
        with doc.table(class_="root-cause"):
            for label, value in (
                ("File", root.file_name or ""),
                ("Line", str(root.line_number)),
                ("Method", root.qualified_method),
            ):
                with doc.tr:
                    doc.th(label)
                    doc.td(value)

    if include_frames and detail.frames:
        doc.h3("Stack Trace")
        with doc.ol(class_="stack-trace"):
            for frame in detail.frames:
                user = frame.is_user_code
                with doc.li(class_="frame-user" if user else "frame-system"):
                    doc.span("[User Code]" if user else "[System]", class_="frame-tag")
                    doc(" ")
                    doc.code(frame.qualified_method)
                    if frame.file_name:
                        doc.span(
                            f"at {frame.file_name}:line {frame.line_number}",
                            class_="frame-location",
                        )

    if detail.additional_data:
        doc.h3("Additional Information")
        with doc.table(class_="additional-data"):
            for key, value in detail.additional_data.items():
                with doc.tr:
                    doc.th(key)
                    doc.td(value)
