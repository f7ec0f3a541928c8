"""Tests for capture.py - walking exceptions into ExceptionDetail chains."""

import dataclasses
import re
from datetime import timezone

import pytest

from excdetail import capture, format_detail
from excdetail.capture import cause_of, error_code, iter_chain, type_name
from excdetail.classify import SYSTEM_PREFIXES
from excdetail.introspect import FrameDescriptor, MethodDescriptor

from .errorcases import (
    FalsyError,
    Importer,
    Unhashable,
    Unprintable,
    capture_in_caller,
    missing_file,
    nested_function_error,
    reraise_context,
    reraise_suppressed_context,
    reraise_wrapped,
    three_levels,
)


def raised(func, *args):
    try:
        func(*args)
    except BaseException as e:
        return e
    raise AssertionError("expected an exception")


def without_timestamps(detail):
    """Detail as a dict with all capture timestamps blanked out."""
    data = detail.to_dict()
    node = data
    while node:
        node["timestamp"] = None
        node = node["inner_exception"]
    return data


class SyntheticIntrospector:
    """Introspector returning fixed frames, for errors without real tracebacks."""

    def __init__(self, frames):
        self._frames = frames

    def frames(self, exc):
        return list(self._frames)


class FailingIntrospector:
    def frames(self, exc):
        yield FrameDescriptor("/app/first.py", 1, 0, None)
        raise RuntimeError("introspection broke")


def test_type_name_is_full_name():
    e = raised(reraise_wrapped)
    detail = capture(e)
    assert detail.exception_type == "RuntimeError"
    assert detail.inner_exception.exception_type == "ValueError"
    assert type_name(Unprintable()) == "tests.errorcases.Unprintable"


def test_message_and_source():
    detail = capture(raised(reraise_wrapped))
    assert detail.message == "wrapper failed"
    assert detail.source == "tests.errorcases"
    assert "invalid literal" in detail.inner_exception.message


def test_timestamp_is_capture_time_utc():
    detail = capture(raised(reraise_wrapped))
    assert detail.timestamp.tzinfo == timezone.utc


def test_no_inner_exception():
    detail = capture(raised(reraise_suppressed_context))
    assert detail.inner_exception is None


def test_inner_from_context():
    detail = capture(raised(reraise_context))
    assert detail.inner_exception.exception_type == "NameError"


def test_inner_equals_capture_of_cause():
    e = raised(three_levels)
    detail = capture(e)
    assert without_timestamps(detail.inner_exception) == without_timestamps(
        capture(e.__cause__)
    )


def test_three_level_chain():
    detail = capture(raised(three_levels))
    assert [d.exception_type for d in detail.chain()] == [
        "RuntimeError",
        "LookupError",
        "ValueError",
    ]
    assert detail.chain()[-1].inner_exception is None


def test_frames_start_at_raising_call():
    """Frames run from the raising call out to the catching one."""
    detail = capture(raised(reraise_wrapped))
    methods = [f.method_name for f in detail.frames]
    assert methods == ["reraise_wrapped", "raised"]
    inner_methods = [f.method_name for f in detail.inner_exception.frames]
    assert inner_methods == ["parse_number", "reraise_wrapped"]


def test_root_cause_is_raising_callee():
    detail = capture_in_caller(capture)
    assert [f.method_name for f in detail.frames] == [
        "parse_number",
        "capture_in_caller",
    ]
    assert detail.root_cause.method_name == "parse_number"
    assert detail.root_cause is detail.frames[0]


def test_frame_details():
    detail = capture(raised(missing_file))
    load = next(f for f in detail.frames if f.method_name == "load")
    assert load.file_name.endswith("errorcases.py")
    assert load.line_number > 0
    assert load.namespace == "tests.errorcases"
    assert load.class_name == "tests.errorcases.Importer"
    assert load.parameters == "Importer self, str path, bool strict"
    assert load.is_user_code


def test_classmethod_frame():
    detail = capture(raised(Importer.build, {"a": 1}))
    build = detail.frames[0]
    assert build.method_name == "build"
    assert build.class_name == "tests.errorcases.Importer"
    assert build.parameters == "type cls, dict spec"


def test_nested_function_frame():
    detail = capture(raised(nested_function_error))
    inner = detail.frames[0]
    assert inner.method_name == "inner"
    assert inner.class_name == "tests.errorcases"
    assert inner.parameters == "int value"


def test_classification_matches_prefixes():
    """User frames never start with a system prefix, system frames always do."""
    prefixes = SYSTEM_PREFIXES | {"tests.errorcases"}
    detail = capture(raised(three_levels), prefixes=prefixes)
    for d in detail.chain():
        for frame in d.frames:
            matches = any(frame.class_name.startswith(p) for p in prefixes)
            assert frame.is_user_code is not matches
    assert any(not f.is_user_code for f in detail.frames)


def test_root_cause_is_own_frame():
    detail = capture(raised(three_levels))
    for d in detail.chain():
        assert d.root_cause in d.frames
        assert d.root_cause.is_user_code
        assert d.root_cause.file_name


def test_root_cause_skips_system_frames():
    prefixes = {"tests.errorcases.Importer"}
    detail = capture(raised(missing_file), prefixes=prefixes)
    assert [f.method_name for f in detail.frames[:2]] == ["_read", "load"]
    assert not detail.frames[0].is_user_code
    assert detail.root_cause.method_name == "missing_file"


def test_error_code_format():
    e = raised(reraise_wrapped)
    code = error_code(e)
    assert re.fullmatch(r"E[0-9A-F]{8}", code)
    assert code == error_code(e)
    assert capture(e).error_code == code


def test_error_code_unhashable():
    assert re.fullmatch(r"E[0-9A-F]{8}", error_code(Unhashable()))
    assert capture(Unhashable()).error_code


def test_unprintable_message():
    detail = capture(Unprintable())
    assert detail.message == "<unprintable Unprintable object>"


def test_never_raised_exception():
    """An exception that was never raised has no traceback."""
    detail = capture(ValueError("never raised"))
    assert detail.frames == ()
    assert detail.root_cause is None
    assert detail.stack_trace is None
    assert detail.source is None


def test_stack_trace_text():
    detail = capture(raised(reraise_wrapped))
    assert "reraise_wrapped" in detail.stack_trace
    assert "errorcases.py" in detail.stack_trace


def test_introspection_failure_keeps_partial_frames(caplog):
    detail = capture(ValueError("x"), introspector=FailingIntrospector())
    assert [f.file_name for f in detail.frames] == ["/app/first.py"]
    assert detail.root_cause is detail.frames[0]
    assert "Error extracting traceback" in caplog.text


def test_cyclic_context_chain():
    a = ValueError("a")
    b = RuntimeError("b")
    a.__context__ = b
    b.__context__ = a
    assert iter_chain(a) == [a, b]
    detail = capture(a)
    assert detail.inner_exception.message == "b"
    assert detail.inner_exception.inner_exception is None


def test_long_chain_without_recursion():
    exc = ValueError("0")
    for i in range(1, 3000):
        new = ValueError(str(i))
        new.__cause__ = exc
        exc = new
    detail = capture(exc)
    assert len(detail.chain()) == 3000
    assert detail.chain()[-1].message == "0"
    text = format_detail(detail, include_frames=False)
    assert text.count("=== Inner Exception ===") == 2999


def test_cause_of():
    e = raised(reraise_suppressed_context)
    assert e.__context__ is not None
    assert cause_of(e) is None
    e = raised(reraise_context)
    assert isinstance(cause_of(e), NameError)


def test_detail_is_frozen():
    detail = capture(raised(reraise_wrapped))
    with pytest.raises(dataclasses.FrozenInstanceError):
        detail.message = "changed"
    with pytest.raises(dataclasses.FrozenInstanceError):
        detail.frames[0].line_number = 1


def test_end_to_end_without_file_info():
    """Frames lacking files fall back to the first frame as root cause."""
    frames = [
        FrameDescriptor(
            None, 0, 0, MethodDescriptor("StringToNumber", "System.Number", "System", ())
        ),
        FrameDescriptor(
            None,
            0,
            0,
            MethodDescriptor(
                "Methode1",
                "BPMS.ControlBehaviour.UserControl",
                "BPMS.ControlBehaviour",
                (("IUnitOfWork", "unitOfWork"), ("Object", "control")),
            ),
        ),
    ]
    inner = ValueError("inner")
    outer = ValueError("bad format")
    outer.__cause__ = inner
    detail = capture(
        outer,
        prefixes={"System", "Microsoft", "mscorlib"},
        introspector=SyntheticIntrospector(frames),
    )
    assert detail.root_cause == detail.frames[0]
    assert detail.frames[0].is_user_code is False
    assert detail.frames[1].parameters == "IUnitOfWork unitOfWork, Object control"
    assert detail.inner_exception.message == "inner"

    text = format_detail(detail)
    assert "Error Code: E" in text
    assert "Type:" in text
    assert "Message: bad format" in text
    inner_section = text.split("=== Inner Exception ===")[1]
    assert "inner" in inner_section
    assert "[System] System.Number.StringToNumber" in text
    assert "[User Code] BPMS.ControlBehaviour.UserControl.Methode1" in text
    assert "  at " not in text


def test_falsy_exception_is_captured_itself():
    try:
        raise KeyError("handled")
    except KeyError:
        detail = capture(FalsyError("mine"))
    assert detail.exception_type == "tests.errorcases.FalsyError"
    assert detail.message == "mine"
