"""Classification of stack frames as application or framework code."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["SYSTEM_PREFIXES", "is_user_code"]

# Declaring-type prefixes considered framework/runtime code (not user code).
# Matched literally with str.startswith, so keep entries distinctive.
SYSTEM_PREFIXES = frozenset(
    {
        "_frozen_importlib",
        "_pytest",
        "asyncio",
        "builtins",
        "concurrent.futures",
        "contextlib",
        "functools",
        "importlib",
        "multiprocessing",
        "pluggy",
        "runpy",
        "socketserver",
        "sqlite3",
        "threading",
        "unittest",
    }
)


def is_user_code(class_name: str, prefixes: Iterable[str] = SYSTEM_PREFIXES) -> bool:
    """True unless the declaring type name starts with a system prefix.

    An empty name never matches, so unresolved frames count as user code.
    """
    name = class_name or ""
    return not any(name.startswith(p) for p in prefixes)
