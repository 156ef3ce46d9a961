"""Shared helpers for model-provider error handling (e.g. rate limit)."""

from openai import APIStatusError, RateLimitError


def is_rate_limit_error(exc: BaseException) -> bool:
    """True if this is an API rate-limit (429) error."""
    if isinstance(exc, RateLimitError):
        return True
    if isinstance(exc, APIStatusError) and getattr(exc, "status_code", None) == 429:
        return True
    return False


def format_provider_error(exc: BaseException) -> str:
    """Return the provider's error message from an exception for console/API output."""
    msg = getattr(exc, "message", None) or getattr(exc, "body", None)
    if isinstance(msg, dict) and "error" in msg:
        err = msg["error"]
        if isinstance(err, dict) and "message" in err:
            return str(err["message"])
        return str(err)
    if msg:
        return str(msg)
    return str(exc) or exc.__class__.__name__
