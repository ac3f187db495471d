"""Transient vs. permanent classification of provider failures.

Pure functions, no side effects, never raise. To teach the invoker a new
transient signal, add a pattern to ``TRANSIENT_PATTERNS``.
"""

import re
from enum import Enum


class ErrorKind(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


TRANSIENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Timeouts and cancellation
    re.compile(r"timeout|timed.?out|etimedout|aborted|cancel", re.IGNORECASE),
    # Rate limiting
    re.compile(r"\b429\b|rate.?limit|too.?many.?requests", re.IGNORECASE),
    # Server-side failure
    re.compile(r"\b5\d\d\b|internal.?server|service.?unavailable|bad.?gateway|overloaded", re.IGNORECASE),
    # Low-level connection failures
    re.compile(
        r"econnreset|econnrefused|enotfound|connection.?(reset|refused|error)"
        r"|name or service not known|getaddrinfo failed",
        re.IGNORECASE,
    ),
)


def classify(message: str) -> ErrorKind:
    """Classify an error message. Empty or non-string input is permanent."""
    if not isinstance(message, str) or not message:
        return ErrorKind.PERMANENT
    if any(pattern.search(message) for pattern in TRANSIENT_PATTERNS):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT


def is_transient(message: str) -> bool:
    return classify(message) is ErrorKind.TRANSIENT


def status_code_of(exc: BaseException) -> int | None:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _structurally_transient(exc: BaseException) -> bool:
    status = status_code_of(exc)
    if status is not None and (status == 429 or 500 <= status <= 599):
        return True
    return isinstance(exc, (TimeoutError, ConnectionError))


def classify_error(exc: BaseException) -> ErrorKind:
    """Classify an exception by its status code and type, then by its text.

    The ``__cause__`` chain is walked so an SDK error wrapped by an adapter
    still counts.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if _structurally_transient(current):
            return ErrorKind.TRANSIENT
        current = current.__cause__
    try:
        message = str(exc)
    except Exception:
        return ErrorKind.PERMANENT
    return classify(message)
