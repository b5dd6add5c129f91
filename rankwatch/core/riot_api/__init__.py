"""
Riot API client package for League of Legends API integration.

This package provides the HTTP client for the Riot API together with the
sliding-log rate limiters and the serialized request dispatcher every call
goes through.
"""

from .client import RiotAPIClient
from .dispatcher import RequestDispatcher
from .rate_limiter import RateLimiter, acquire_all
from .errors import (
    RiotAPIError,
    RateLimitError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    BadRequestError,
    ServiceUnavailableError,
    ResponseDecodeError,
    error_for_status,
)
from .models import (
    AccountDTO,
    SummonerDTO,
    LeagueEntryDTO,
    MatchDTO,
    ParticipantDTO,
    CurrentGameInfoDTO,
    CurrentGameParticipantDTO,
)
from .endpoints import RiotAPIEndpoints
from .constants import Region, Platform, region_for_platform, platform_from_match_id

__all__ = [
    "RiotAPIClient",
    "RequestDispatcher",
    "RateLimiter",
    "acquire_all",
    "RiotAPIError",
    "RateLimitError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "BadRequestError",
    "ServiceUnavailableError",
    "ResponseDecodeError",
    "error_for_status",
    "AccountDTO",
    "SummonerDTO",
    "LeagueEntryDTO",
    "MatchDTO",
    "ParticipantDTO",
    "CurrentGameInfoDTO",
    "CurrentGameParticipantDTO",
    "RiotAPIEndpoints",
    "Region",
    "Platform",
    "region_for_platform",
    "platform_from_match_id",
]
