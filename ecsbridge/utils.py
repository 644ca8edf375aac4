"""Helpers for zero-value checks and retrying with backoff."""

from __future__ import annotations

import dataclasses
import threading
import time
import types
import typing
from collections.abc import Sized
from concurrent.futures import CancelledError
from typing import Any, Callable, TypeVar

T = TypeVar("T")

_UNCOMPARABLE = (list, dict, set, bytearray)
_UNCOMPARABLE_NAMES = frozenset(
    {"list", "dict", "set", "bytearray", "List", "Dict", "Set",
     "typing.List", "typing.Dict", "typing.Set"}
)


def _uncomparable_annotation_text(text: str) -> bool:
    for part in text.split("|"):
        head = part.strip().split("[", 1)[0].strip()
        if head.startswith("Optional"):
            inner = part.strip()[len("Optional"):].strip("[] ")
            if _uncomparable_annotation_text(inner):
                return True
        elif head in _UNCOMPARABLE_NAMES:
            return True
    return False


def _uncomparable_type(tp: Any) -> bool:
    if isinstance(tp, str):
        return _uncomparable_annotation_text(tp)
    origin = typing.get_origin(tp) or tp
    if origin in _UNCOMPARABLE:
        return True
    if origin is typing.Union or origin is types.UnionType:
        return any(_uncomparable_type(arg) for arg in typing.get_args(tp))
    if isinstance(origin, type) and dataclasses.is_dataclass(origin):
        return _uncomparable_dataclass_type(origin)
    return False


def _uncomparable_dataclass_type(cls: type) -> bool:
    return any(_uncomparable_type(f.type) for f in dataclasses.fields(cls))


def _comparable_value(value: Any) -> bool:
    if isinstance(value, _UNCOMPARABLE):
        return False
    if isinstance(value, tuple):
        return all(_comparable_value(item) for item in value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        if _uncomparable_dataclass_type(type(value)):
            return False
        return all(
            _comparable_value(getattr(value, f.name)) for f in dataclasses.fields(value)
        )
    return True


def _is_zero_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex)):
        return value == 0
    if isinstance(value, (str, bytes)):
        return len(value) == 0
    if isinstance(value, tuple):
        return all(_is_zero_value(item) for item in value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(_is_zero_value(getattr(value, f.name)) for f in dataclasses.fields(value))
    return False


def zero_or_nil(obj: Any) -> bool:
    """Return True if ``obj`` is None, empty, or equal to its type's zero value.

    Containers count as zero when empty. Dataclass instances count as zero
    when every field holds a zero value, but never when they hold (or are
    declared to hold) lists, dicts or sets, which cannot be compared.
    """
    if obj is None:
        return True
    is_record = dataclasses.is_dataclass(obj) and not isinstance(obj, type)
    if not is_record and isinstance(obj, Sized):
        return len(obj) == 0
    if not _comparable_value(obj):
        return False
    return _is_zero_value(obj)


def retry_with_backoff(backoff: Any, fn: Callable[[], T]) -> T:
    """Call ``fn`` until it succeeds, sleeping ``backoff.duration()`` between tries.

    An exception with a ``retry()`` method returning False is re-raised at once.
    """
    return retry_with_backoff_ctx(threading.Event(), backoff, fn)


def retry_with_backoff_ctx(
    cancel_event: threading.Event, backoff: Any, fn: Callable[[], T]
) -> T:
    """Like :func:`retry_with_backoff`, but stop once ``cancel_event`` is set.

    Raises concurrent.futures.CancelledError when cancelled before a try.
    """
    while True:
        if cancel_event.is_set():
            raise CancelledError("context canceled")
        try:
            return fn()
        except Exception as err:
            retry = getattr(err, "retry", None)
            if callable(retry) and not retry():
                raise
        time.sleep(backoff.duration())