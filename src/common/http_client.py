"""Shared HTTP helpers used by remote repositories.

Encapsulates timeout, retry and caching so repository code only deals with
``(status, headers, text)`` tuples. Transport failures are reported as status
0 rather than raised, leaving the decision to the caller.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


# Simple in-memory cache for HTTP responses, shared by every remote source.
_http_cache: Dict[str, Tuple[Any, float]] = {}
_http_cache_lock = threading.Lock()


def _get_cache_key(method: str, url: str, headers: Optional[Dict[str, str]] = None) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    return f"{method}:{url}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop every cached response."""
    with _http_cache_lock:
        _http_cache.clear()


def _trace(message: str, url: str, **fields: Any) -> None:
    if is_debug_enabled(logger):
        logger.debug(
            message,
            extra=extra_context(component="http_client", action="GET", target=safe_url(url), **fields)
        )


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """GET ``url`` with timeout, retries and caching.

    Responses below 500 are cached for ``Constants.HTTP_CACHE_TTL_SEC``;
    server errors and transport failures are retried with exponential
    backoff. After ``Constants.HTTP_RETRY_MAX`` attempts the status is 0 and
    the text describes the last failure.
    """
    cache_key = _get_cache_key('GET', url, headers)

    with _http_cache_lock:
        entry = _http_cache.get(cache_key)
        if entry is not None and _is_cache_valid(entry):
            _trace("HTTP cache hit", url, event="cache_hit")
            return entry[0]

    last_failure = None
    for attempt in range(1, Constants.HTTP_RETRY_MAX + 1):
        if attempt > 1:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 2)))
        with Timer() as t:
            try:
                response = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, headers=headers, **kwargs)
            except requests.Timeout:
                last_failure = "timeout"
            except requests.RequestException as exc:
                last_failure = str(exc)
            else:
                last_failure = None
        if last_failure is not None:
            _trace("HTTP request failed", url, event="http_exception", attempt=attempt,
                   outcome=last_failure, duration_ms=t.duration_ms())
            continue

        _trace("HTTP response", url, event="http_response", attempt=attempt,
               status_code=response.status_code, duration_ms=t.duration_ms())
        if response.status_code >= 500:
            last_failure = f"HTTP {response.status_code}"
            continue
        result = (response.status_code, dict(response.headers), response.text)
        with _http_cache_lock:
            _http_cache[cache_key] = (result, time.time())
        return result

    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_failure}"
