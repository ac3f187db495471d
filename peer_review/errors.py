"""Classified errors surfaced by the review pipeline and its boundaries.

Every failure a caller can observe is one of these. The ``user_message`` is
safe to show to an end user; raw provider diagnostics only ever travel as the
chained ``__cause__`` and in logs.
"""

GENERIC_MESSAGE = "Something went wrong. Please try again."


def provider_message(role: str) -> str:
    return f"Unable to connect to {role}. Please check your API key and try again."


class ReviewError(Exception):
    """Base class for classified pipeline errors."""

    kind = "unknown"

    def __init__(self, message: str, role: str | None = None) -> None:
        self.user_message = message
        self.role = role
        super().__init__(message)


class ValidationError(ReviewError):
    """Bad caller input. The message is shown verbatim."""

    kind = "validation"


class ConfigurationError(ReviewError):
    """Missing credentials or an inconsistent settings file. Never retried."""

    kind = "configuration"


class ProviderError(ReviewError):
    """A backend failed after the invoker gave up on it."""

    kind = "provider"

    def __init__(self, role: str, message: str | None = None) -> None:
        super().__init__(message or provider_message(role), role=role)


class UnknownError(ReviewError):
    kind = "unknown"

    def __init__(self, message: str = GENERIC_MESSAGE, role: str | None = None) -> None:
        super().__init__(message, role=role)
