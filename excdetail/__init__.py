from .capture import capture, error_code
from .classify import SYSTEM_PREFIXES, is_user_code
from .console import DetailFormatter, load, print_detail, unload
from .enrich import enrich, register_category
from .frames import extract_frame, select_root_cause
from .html import html_detail
from .introspect import (
    FrameDescriptor,
    MethodDescriptor,
    StackIntrospector,
    TracebackIntrospector,
)
from .model import ExceptionDetail, StackFrameDetail
from .text import format_detail, format_levels, format_root_cause

__all__ = [
    "capture",
    "error_code",
    "SYSTEM_PREFIXES",
    "is_user_code",
    "extract_frame",
    "select_root_cause",
    "enrich",
    "register_category",
    "format_detail",
    "format_levels",
    "format_root_cause",
    "html_detail",
    "print_detail",
    "DetailFormatter",
    "load",
    "unload",
    "ExceptionDetail",
    "StackFrameDetail",
    "FrameDescriptor",
    "MethodDescriptor",
    "StackIntrospector",
    "TracebackIntrospector",
]
