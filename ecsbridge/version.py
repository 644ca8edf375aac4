"""Build version information reported by the plugin."""

from __future__ import annotations

import json

COMMAND = "version"


def version_string(version: str, git_porcelain: str, git_short_hash: str) -> str:
    """Return the version information as a compact JSON object.

    The build counts as dirty unless ``git_porcelain`` (the number of lines
    from ``git status --porcelain``) is exactly "0" after trimming.
    """
    info = {
        "version": version,
        "dirty": git_porcelain.strip() != "0",
        "gitShortHash": git_short_hash,
    }
    return json.dumps(info, separators=(",", ":"))