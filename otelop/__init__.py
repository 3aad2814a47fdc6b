"""Collector resource model, receiver port discovery, platform detection and task-based reconciliation."""

__version__ = "0.1.0"
__all__ = [
    "adapters",
    "api",
    "autodetect",
    "collector",
    "config",
    "controller",
    "parser",
    "version",
]