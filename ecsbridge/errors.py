"""Errors that carry a decision on whether an operation should be retried."""

from __future__ import annotations


class Retriable:
    """Holds whether an operation should be retried."""

    def __init__(self, retry: bool) -> None:
        self._retry = retry

    def retry(self) -> bool:
        """Return whether the operation should be retried."""
        return self._retry

    def __repr__(self) -> str:
        return f"Retriable({self._retry!r})"


class RetriableError(Exception):
    """An error that states whether the failed operation may be retried."""

    def __init__(self, retriable: Retriable, err: BaseException) -> None:
        super().__init__(str(err))
        self.retriable = retriable
        self.err = err
        self.__cause__ = err

    def retry(self) -> bool:
        """Return whether the failed operation should be retried."""
        return self.retriable.retry()

    def __str__(self) -> str:
        return str(self.err)