"""
Logging setup shared by the services.

Every record goes to stdout as one line tagged with the service name, so
interleaved container logs stay attributable. The level comes from the
caller or from LOG_LEVEL. httpx logs one INFO line per upstream request;
those are held back to WARNING unless the service itself runs at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys

_CHATTY_LIBRARIES = ("httpx", "httpcore")


class _ServiceFormatter(logging.Formatter):
    """Adds ``service_name`` to records that were not tagged explicitly."""

    def __init__(self, service_name: str, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        record.service_name = getattr(record, "service_name", self._service_name)
        return super().format(record)


def resolve_level(level: str | int | None) -> int:
    """
    Turn a level name or number into a logging level; unknown names become INFO.

    >>> resolve_level("debug") == logging.DEBUG
    True
    >>> resolve_level("loud") == logging.INFO
    True
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(service_name: str, level: str | int | None = None) -> None:
    """
    Point the root logger at stdout with the service-name format.
    Calling it again only swaps the formatter and level.
    """
    level = resolve_level(level)
    root = logging.getLogger()
    root.setLevel(level)
    formatter = _ServiceFormatter(
        service_name,
        fmt="%(asctime)s [%(levelname)s] %(service_name)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        root.addHandler(handler)
    for h in root.handlers:
        h.setFormatter(formatter)

    library_level = level if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)
