"""Error handling utilities for reconciliation steps.

Provides a decorator to handle Riot API errors consistently across the
scheduler and the live-match sweep.

Error Handling Strategy:
- Not found errors: a valid negative result, logged at info, return None
- Rate limit errors: logged as a warning (the dispatcher already retried once)
- General errors: Re-raise if critical=True, log and return None otherwise
"""

import inspect
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar, ParamSpec

import structlog

from rankwatch.core.riot_api.errors import NotFoundError, RateLimitError

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def handle_riot_api_errors(
    *,
    operation: str,
    critical: bool = True,
    log_context: Optional[Callable[..., dict[str, Any]]] = None,
):
    """Decorator to handle common Riot API errors with consistent behavior.

    :param operation: Description of the operation (e.g., "notify participant").
    :param critical: If True, re-raise errors other than not-found. If False,
                     log and return None.
    :param log_context: Optional function extracting context from args for logging.
                        Example: lambda self, participant, match: {"puuid": participant.summoner.puuid}

    Usage example::

        @handle_riot_api_errors(
            operation="announce participant",
            critical=False,
            log_context=lambda self, participant, match: {"match_id": match.match_id},
        )
        async def _announce_participant(self, participant, match):
            ...
    """

    def decorator(
        func: Callable[P, Awaitable[R]],
    ) -> Callable[P, Awaitable[Optional[R]]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"{func.__name__} must be a coroutine function")

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Optional[R]:
            context = _extract_log_context(log_context, args, kwargs, func.__name__)
            try:
                return await func(*args, **kwargs)
            except Exception as error:
                _handle_error(error, operation, critical, context)
                return None  # For errors that don't re-raise

        return async_wrapper

    return decorator


def _extract_log_context(
    log_context: Optional[Callable], args: tuple, kwargs: dict, func_name: str
) -> dict:
    """Extract logging context from function arguments."""
    if not log_context:
        return {}

    try:
        return log_context(*args, **kwargs)
    except Exception as e:
        logger.warning(
            "Failed to extract log context",
            error=str(e),
            function=func_name,
        )
        return {}


def _handle_error(
    error: Exception, operation: str, critical: bool, context: dict
) -> None:
    """Handle exceptions with consistent logging and re-raise logic."""
    if isinstance(error, NotFoundError):
        logger.info(f"Nothing found during {operation}", **context)
        return

    if isinstance(error, RateLimitError):
        logger.warning(
            f"Rate limit hit during {operation}",
            retry_after=error.retry_after,
            **context,
        )
    else:
        logger.error(
            f"Failed to {operation}",
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )

    if critical:
        raise error
