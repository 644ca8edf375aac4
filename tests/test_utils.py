import threading
from concurrent.futures import CancelledError
from dataclasses import dataclass

import pytest

from ecsbridge.backoff import SimpleBackoff
from ecsbridge.errors import Retriable, RetriableError
from ecsbridge.utils import retry_with_backoff, retry_with_backoff_ctx, zero_or_nil


@dataclass
class ZeroTest:
    test_int: int = 0
    test_str: str = ""


@dataclass
class Uncomparable:
    uncomparable: list[int]


@pytest.mark.parametrize(
    "param, expected",
    [
        pytest.param(None, True, id="nil is nil"),
        pytest.param(0, True, id="0 is 0"),
        pytest.param("", True, id="empty string is zero"),
        pytest.param(ZeroTest(), True, id="zero struct"),
        pytest.param(ZeroTest(test_str="asdf"), False, id="populated struct"),
        pytest.param(1, False, id="1 is not 0"),
        pytest.param([1, 2, 3], False, id="non-empty list"),
        pytest.param([], True, id="empty list"),
        pytest.param(Uncomparable([1, 2, 3]), False, id="uncomparable with values"),
        pytest.param(Uncomparable(None), False, id="uncomparable with none"),
        pytest.param({}, True, id="empty map"),
        pytest.param({"foo": "bar"}, False, id="non-empty map"),
    ],
)
def test_zero_or_nil(param, expected):
    assert zero_or_nil(param) is expected


def test_retry_with_backoff_retries():
    counter = 3

    def fn():
        nonlocal counter
        if counter == 0:
            return "done"
        counter -= 1
        raise RuntimeError("err")

    result = retry_with_backoff(SimpleBackoff(0.01, 0.01, 0, 1), fn)
    assert counter == 0
    assert result == "done"


def test_retry_with_backoff_no_retries():
    counter = 3

    def fn():
        nonlocal counter
        counter -= 1
        raise RetriableError(Retriable(False), RuntimeError("can't retry"))

    with pytest.raises(RetriableError, match="can't retry"):
        retry_with_backoff(SimpleBackoff(10, 20, 0, 2), fn)
    assert counter == 2


def test_retry_with_backoff_ctx_retries():
    counter = 3

    def fn():
        nonlocal counter
        if counter == 0:
            return "done"
        counter -= 1
        raise RuntimeError("err")

    result = retry_with_backoff_ctx(threading.Event(), SimpleBackoff(0.1, 0.1, 0, 1), fn)
    assert result == "done"
    assert counter == 0


def test_retry_with_backoff_ctx_already_cancelled():
    counter = 3
    event = threading.Event()
    event.set()

    def fn():
        nonlocal counter
        counter -= 1
        raise RetriableError(Retriable(False), RuntimeError("can't retry"))

    with pytest.raises(CancelledError):
        retry_with_backoff_ctx(event, SimpleBackoff(10, 20, 0, 2), fn)
    assert counter == 3


def test_retry_with_backoff_ctx_cancel_during_retries():
    counter = 2
    event = threading.Event()

    def fn():
        nonlocal counter
        counter -= 1
        if counter == 0:
            event.set()
        raise RuntimeError("err")

    with pytest.raises(CancelledError):
        retry_with_backoff_ctx(event, SimpleBackoff(0.1, 0.1, 0, 1), fn)
    assert counter == 0