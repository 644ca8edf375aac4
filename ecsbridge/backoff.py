"""Exponential backoff with additive jitter."""

from __future__ import annotations

import random
import threading


class SimpleBackoff:
    """Backoff that grows from ``minimum`` to ``maximum`` by ``multiple`` each time.

    Durations are in seconds. A random jitter of up to ``jitter_multiple``
    times the current duration is always added, never subtracted, so the
    absolute maximum is ``maximum * (1 + jitter_multiple)``.
    """

    def __init__(
        self,
        minimum: float,
        maximum: float,
        jitter_multiple: float,
        multiple: float,
    ) -> None:
        self._start = minimum
        self._current = minimum
        self._max = maximum
        self._jitter_multiple = jitter_multiple
        self._multiple = multiple
        self._lock = threading.Lock()

    def duration(self) -> float:
        """Return the time to wait now and advance to the next step."""
        with self._lock:
            ret = self._current
            self._current = min(self._max, self._current * self._multiple)
        return add_jitter(ret, ret * self._jitter_multiple)

    def reset(self) -> None:
        """Return the backoff to its initial duration."""
        with self._lock:
            self._current = self._start


def add_jitter(duration: float, jitter: float) -> float:
    """Add a random amount in ``[0, jitter)`` to ``duration``."""
    if jitter == 0:
        return duration
    return duration + random.random() * jitter