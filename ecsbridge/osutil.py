"""Thin, replaceable access to process and environment facilities."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OSProcess:
    """A process identified by its pid that can be sent signals."""

    pid: int

    def signal(self, sig: int) -> None:
        """Send ``sig`` to the process.

        Raises ValueError for a pid that does not name a single process, and
        the usual OSError subclasses (e.g. ProcessLookupError) from the system.
        """
        if self.pid == -1:
            raise ValueError("os: process already released")
        if self.pid <= 0:
            raise ValueError("os: process not initialized")
        os.kill(self.pid, int(sig))


class OS:
    """Operating-system operations, kept behind an object so they can be swapped in tests."""

    def find_process(self, pid: int) -> OSProcess:
        """Return a handle for the process with the given pid."""
        return OSProcess(pid)

    def getenv(self, key: str) -> str:
        """Return the value of the environment variable, or an empty string."""
        return os.environ.get(key, "")