import pytest

from ecsbridge.errors import Retriable, RetriableError


@pytest.mark.parametrize("flag", [True, False])
def test_retriable_returns_flag(flag):
    assert Retriable(flag).retry() is flag


@pytest.mark.parametrize("flag", [True, False])
def test_retriable_error_delegates_retry(flag):
    err = RetriableError(Retriable(flag), ValueError("can't retry"))
    assert err.retry() is flag


def test_retriable_error_message_and_cause():
    cause = ValueError("can't retry")
    err = RetriableError(Retriable(False), cause)
    assert str(err) == "can't retry"
    assert err.__cause__ is cause
    assert err.err is cause


def test_retriable_error_wraps_runtime_error():
    cause = RuntimeError("boom")
    err = RetriableError(Retriable(True), cause)
    assert err.retry() is True
    assert str(err) == "boom"
    assert err.err is cause