"""
Service layer custom exceptions.

Raised by feature services so callers (command handlers, the bootstrap) can
report failures without knowing about Riot API or database details.
"""

from typing import Any, Dict, Optional


class ServiceException(Exception):
    """Base exception for all service layer errors."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.service and self.operation:
            return f"[{self.service}.{self.operation}] {self.message}"
        return self.message


class TrackingServiceError(ServiceException):
    """Exception raised by TrackingService during onboarding or offboarding."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            service="TrackingService",
            operation=operation,
            context=context,
            original_error=original_error,
        )


class ValidationError(ServiceException):
    """Exception raised for input validation errors in services."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        service: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            service=service,
            operation=operation,
            context={"field": field, "value": value},
        )
        self.field = field
        self.value = value


class SummonerNotFoundError(TrackingServiceError):
    """The Riot ID does not exist, or is not tracked where expected."""
