"""Error taxonomy for provider calls and identifier lookups."""

from typing import Optional


RATE_LIMITED_MESSAGE = "Rate limited by API. Please wait a moment and try again."


class CryptoDataError(Exception):
    """Base class for failures surfaced to the calling agent as a failed tool call."""

    error_type = "internal_error"

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class RateLimited(CryptoDataError):
    """Provider answered 429."""

    error_type = "rate_limited"

    def __init__(self, url: Optional[str] = None, message: str = RATE_LIMITED_MESSAGE):
        super().__init__(message, url=url)


class UpstreamError(CryptoDataError):
    """Provider answered with a non-2xx status other than 429, or an unreadable body."""

    error_type = "upstream_error"

    def __init__(self, status_code: int, reason: str, url: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"API request failed: {status_code} {reason}".rstrip(), url=url)


class NetworkError(CryptoDataError):
    """The request never produced a response (DNS, connect, timeout, reset)."""

    error_type = "network_error"


class UnknownIdentifierError(CryptoDataError, ValueError):
    """A display name or ticker has no known provider identifier."""

    error_type = "unknown_identifier"

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unknown {kind} identifier: {value!r}")
