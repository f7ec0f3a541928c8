"""Plain data records produced by capture.

Both records are frozen dataclasses holding only builtin values, so they
can be handed to any logging, transport or storage layer as-is. to_dict()
gives a JSON-compatible shape and from_dict() rebuilds an equal record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, cast

__all__ = ["StackFrameDetail", "ExceptionDetail"]


@dataclass(frozen=True)
class StackFrameDetail:
    """One call-stack location with its provenance and classification."""

    file_name: str | None = None  # None when the source file is unknown
    line_number: int = 0  # 1-based, 0 = unknown
    column_number: int = 0  # 1-based, 0 = unknown
    method_name: str | None = None
    class_name: str = ""  # Declaring type (or module) full name
    parameters: str = ""  # "type name, type name"
    is_user_code: bool = True
    namespace: str = ""

    @property
    def qualified_method(self) -> str:
        """ClassName.MethodName as shown in reports."""
        return f"{self.class_name}.{self.method_name or ''}"

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StackFrameDetail:
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass(frozen=True)
class ExceptionDetail:
    """One exception of a cause chain, linked to its nested cause."""

    message: str
    exception_type: str
    timestamp: datetime
    error_code: str
    source: str | None = None
    stack_trace: str | None = None
    frames: tuple[StackFrameDetail, ...] = ()
    inner_exception: ExceptionDetail | None = None
    root_cause: StackFrameDetail | None = None  # Always one of frames
    additional_data: dict[str, str] = field(default_factory=dict)

    def chain(self) -> list[ExceptionDetail]:
        """This detail followed by all nested inner details."""
        result = []
        detail: ExceptionDetail | None = self
        while detail is not None:
            result.append(detail)
            detail = detail.inner_exception
        return result

    def to_dict(self) -> dict[str, Any]:
        """Plain builtin representation (JSON-compatible).

        The root cause is stored as an index into frames so that it keeps
        referring to one of this node's own frames after a round trip.
        """
        # Built innermost-first to avoid recursion on long chains
        result = None
        for detail in reversed(self.chain()):
            root_index = None
            if detail.root_cause is not None:
                root_index = detail.frames.index(detail.root_cause)
            result = {
                "message": detail.message,
                "exception_type": detail.exception_type,
                "source": detail.source,
                "timestamp": detail.timestamp.isoformat(),
                "stack_trace": detail.stack_trace,
                "frames": [f.to_dict() for f in detail.frames],
                "inner_exception": result,
                "root_cause": root_index,
                "error_code": detail.error_code,
                "additional_data": dict(detail.additional_data),
            }
        return cast("dict[str, Any]", result)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExceptionDetail:
        nodes = []
        node: dict[str, Any] | None = data
        while node is not None:
            nodes.append(node)
            node = node.get("inner_exception")
        detail = None
        for node in reversed(nodes):
            frames = tuple(
                StackFrameDetail.from_dict(f) for f in node.get("frames", ())
            )
            root_index = node.get("root_cause")
            detail = cls(
                message=node["message"],
                exception_type=node["exception_type"],
                timestamp=datetime.fromisoformat(node["timestamp"]),
                error_code=node["error_code"],
                source=node.get("source"),
                stack_trace=node.get("stack_trace"),
                frames=frames,
                inner_exception=detail,
                root_cause=frames[root_index] if root_index is not None else None,
                additional_data=dict(node.get("additional_data") or {}),
            )
        return cast(ExceptionDetail, detail)
