"""Error types raised by the Airtable client.

Every failure is an :class:`AirtableError` tagged with an :class:`ErrorKind`,
so callers can branch on ``err.kind`` instead of the exception class.
The subclasses exist for ``except`` convenience only.
"""

import enum


class ErrorKind(str, enum.Enum):
    """Discriminator for :class:`AirtableError`."""

    RATE_LIMITED = "rate_limited"
    API_ERROR = "api_error"
    VALIDATION_ERROR = "validation_error"


class AirtableError(Exception):
    """Raised when a request fails or a call is rejected locally."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        kind: ErrorKind = ErrorKind.API_ERROR,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.kind = kind

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status_code={self.status_code!r}, error_type={self.error_type!r}, "
            f"kind={self.kind.value!r})"
        )


class RateLimitError(AirtableError):
    """Raised for any HTTP 429 response."""

    def __init__(self, message: str):
        super().__init__(
            message,
            status_code=429,
            error_type="RATE_LIMIT",
            kind=ErrorKind.RATE_LIMITED,
        )


class BatchSizeError(AirtableError):
    """Raised before any request when a single call exceeds the record limit."""

    def __init__(self, message: str):
        super().__init__(message, kind=ErrorKind.VALIDATION_ERROR)
