"""Centralized logging helpers.

Every module keeps its own ``logger = logging.getLogger(__name__)``; this
module only owns root configuration and the small helpers used to attach
structured context to DEBUG records.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants

_SENSITIVE_KEYS = ("token", "password", "secret", "apikey", "api_key", "auth")
_TOKEN_PATTERN = re.compile(r"(?i)(token|password|secret|api_?key)=([^&\s]+)")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    The level comes from ``level`` when given, otherwise from the
    ``UNITRESOLVE_LOG_LEVEL`` environment variable, defaulting to INFO.
    Calling it again only adjusts the level.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    if not isinstance(level_value, int):
        level_value = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level_value, format=Constants.LOG_FORMAT)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True if DEBUG records of ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload, dropping empty values and redacting secrets."""
    context: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            value = "***"
        context[key] = value
    return context


def redact(text: str) -> str:
    """Mask ``token=...`` style secrets inside free text."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(lambda m: f"{m.group(1)}=***", text)


def safe_url(url: str) -> str:
    """Strip credentials and query string from a URL before logging it."""
    if not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds; keeps counting while the block is running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
