"""
Chat backend errors and their classification.

The transport decides between retrying and failing based on ErrorKind.
Classification is duck-typed so that errors raised by third-party chat
clients classify the same way as ChatApiError, as long as they expose
similar attributes (status_code, error, code, headers, retry_after).
"""

import asyncio
from enum import Enum
from typing import Any, Mapping, Optional


# Permanent backend error codes - never retried
FATAL_ERROR_CODES = frozenset({
    "invalid_auth",
    "not_authed",
    "token_revoked",
    "account_inactive",
    "missing_scope",
    "invalid_arguments",
    "invalid_arg_name",
    "invalid_arg_value",
    "channel_not_found",
    "not_in_channel",
    "restricted_action",
    "invalid_array_arg",
    "invalid_charset",
    "msg_too_long",
})

RATE_LIMITED_ERROR_CODE = "ratelimited"

NETWORK_ERROR_CODES = frozenset({"ETIMEDOUT", "ECONNRESET", "ENOTFOUND", "EAI_AGAIN"})


class ChatApiError(Exception):
    """Error returned by the chat backend"""

    def __init__(
        self,
        message: str,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
        code: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.error = error
        self.status_code = status_code
        self.retry_after = retry_after
        self.code = code
        self.headers = dict(headers) if headers else {}

    def __repr__(self) -> str:
        return (
            f"ChatApiError({str(self)!r}, error={self.error!r}, "
            f"status_code={self.status_code!r})"
        )


class ErrorKind(str, Enum):
    """How the transport treats a failed call."""

    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"
    TRANSIENT = "transient"
    UNCLASSIFIED = "unclassified"


def get_status_code(err: BaseException) -> Optional[int]:
    status = getattr(err, "status_code", None)
    if status is None:
        response = getattr(err, "response", None)
        status = getattr(response, "status", None) or getattr(response, "status_code", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def get_error_code(err: BaseException) -> Optional[str]:
    """Backend error code, e.g. "ratelimited" or "channel_not_found"."""
    error = getattr(err, "error", None)
    if error is None:
        data = getattr(err, "data", None)
        if isinstance(data, Mapping):
            error = data.get("error")
    return str(error) if error is not None else None


def _get_header(err: BaseException, key: str) -> Optional[str]:
    headers = getattr(err, "headers", None)
    if not headers:
        headers = getattr(getattr(err, "response", None), "headers", None)
    if not headers:
        return None
    for name in (key.lower(), key, key.upper()):
        value = headers.get(name)
        if value is not None:
            if isinstance(value, (list, tuple)):
                return value[0] if value else None
            return str(value)
    return None


def get_retry_after(err: BaseException) -> float:
    """Server-declared retry delay in seconds (0 when absent)."""
    retry_after = getattr(err, "retry_after", None)
    if isinstance(retry_after, (int, float)) and retry_after > 0:
        return float(retry_after)

    header = _get_header(err, "Retry-After")
    if header:
        try:
            seconds = float(header)
        except ValueError:
            seconds = 0.0
        if seconds > 0:
            return seconds

    data = getattr(err, "data", None)
    if isinstance(data, Mapping) and data.get("retry_after"):
        try:
            return float(data["retry_after"])
        except (TypeError, ValueError):
            return 0.0
    return 0.0


def is_rate_limit_error(err: BaseException) -> bool:
    if get_status_code(err) == 429:
        return True
    return get_error_code(err) == RATE_LIMITED_ERROR_CODE


def is_fatal_error(err: BaseException) -> bool:
    return get_error_code(err) in FATAL_ERROR_CODES


def is_transient_error(err: BaseException) -> bool:
    status = get_status_code(err)
    if status is not None and status >= 500:
        return True
    if str(getattr(err, "code", "") or "") in NETWORK_ERROR_CODES:
        return True
    return isinstance(err, (ConnectionError, TimeoutError, asyncio.TimeoutError))


def classify_error(err: BaseException) -> ErrorKind:
    """Classify a failed backend call (rate limit wins over everything)."""
    if is_rate_limit_error(err):
        return ErrorKind.RATE_LIMITED
    if is_fatal_error(err):
        return ErrorKind.FATAL
    if is_transient_error(err):
        return ErrorKind.TRANSIENT
    return ErrorKind.UNCLASSIFIED
