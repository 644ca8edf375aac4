"""Bridge network plugin logic for containers: bridge, veth pair, IPAM and teardown."""

__version__ = "0.1.0"

__all__ = [
    "backoff",
    "commands",
    "contexts",
    "engine",
    "errors",
    "gateway",
    "osutil",
    "types",
    "utils",
    "version",
]