"""Configuration parameters, path settings, file watching, metrics and auth helpers for a media streaming server."""

__version__ = "0.1.0"

__all__ = [
    "durations",
    "metrics",
    "netutil",
    "params",
    "pathconf",
    "watcher",
]