"""Riot API error hierarchy and status-code mapping."""

from typing import Any, Dict, Optional, Type


class RiotAPIError(Exception):
    """A Riot API call that did not produce usable data."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        retry_after: Optional[float] = None,
        url: Optional[str] = None,
    ) -> None:
        """
        Args:
            message: Error message
            status_code: HTTP status of the final response, if any
            response_data: Decoded error body, if it was JSON
            retry_after: ``Retry-After`` seconds reported with a 429
            url: Request URL
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data: Dict[str, Any] = response_data or {}
        self.retry_after = retry_after
        self.url = url

    def __str__(self) -> str:
        label = f"{self.status_code} " if self.status_code else ""
        suffix = f" [{self.url}]" if self.url else ""
        return f"Riot API error {label}{self.message}{suffix}"


class NotFoundError(RiotAPIError):
    """404: the resource does not exist. A negative result, not a failure."""


class RateLimitError(RiotAPIError):
    """429 that persisted through the cool-down retry."""


class BadRequestError(RiotAPIError):
    """400."""


class AuthenticationError(RiotAPIError):
    """401: missing or expired API key."""


class ForbiddenError(RiotAPIError):
    """403: key lacks access to the endpoint."""


class ServiceUnavailableError(RiotAPIError):
    """503."""


class ResponseDecodeError(RiotAPIError):
    """2xx response whose body is not valid JSON."""


STATUS_ERRORS: Dict[int, Type[RiotAPIError]] = {
    400: BadRequestError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitError,
    503: ServiceUnavailableError,
}

STATUS_MESSAGES: Dict[int, str] = {
    400: "Invalid request parameters",
    401: "Invalid API key",
    403: "Access forbidden",
    404: "Resource not found",
    429: "Rate limit exceeded after retry",
    503: "Service unavailable",
}


def error_for_status(
    status_code: int,
    url: Optional[str] = None,
    response_data: Optional[Dict[str, Any]] = None,
    retry_after: Optional[float] = None,
) -> RiotAPIError:
    """Build the error matching a non-2xx status; unknown codes map to the base class."""
    error_class = STATUS_ERRORS.get(status_code, RiotAPIError)
    message = STATUS_MESSAGES.get(status_code, f"Unexpected status {status_code}")
    return error_class(
        message,
        status_code=status_code,
        response_data=response_data,
        retry_after=retry_after,
        url=url,
    )
