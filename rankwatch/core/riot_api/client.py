"""Typed Riot API client.

Owns the HTTP session and the request budget. Every endpoint method builds a
URL, sends it through the shared ``RequestDispatcher`` and validates the body
into a DTO from ``models``.
"""

from typing import Any, Callable, List, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from rankwatch.core.config import Settings, get_global_settings
from .constants import Platform, Region
from .dispatcher import RequestDispatcher
from .endpoints import RiotAPIEndpoints
from .errors import NotFoundError, RiotAPIError
from .models import (
    AccountDTO,
    CurrentGameInfoDTO,
    LeagueEntryDTO,
    MatchDTO,
    SummonerDTO,
)
from .rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)

DTO = TypeVar("DTO", bound=BaseModel)


def build_default_limiters(settings: Settings) -> List[RateLimiter]:
    """Short and long window limiters sized from settings."""
    return [
        RateLimiter(
            settings.rate_limit_short_requests,
            settings.rate_limit_short_window_seconds,
            name="short",
        ),
        RateLimiter(
            settings.rate_limit_long_requests,
            settings.rate_limit_long_window_seconds,
            name="long",
        ),
    ]


class RiotAPIClient:
    """Riot API client; all traffic shares one dispatcher and one budget."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        region: Optional[Region] = None,
        platform: Optional[Platform] = None,
        session: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        limiters: Optional[List[RateLimiter]] = None,
        request_callback: Optional[Callable[[str, int], None]] = None,
    ):
        """
        Args:
            api_key: Sent as ``X-Riot-Token`` (settings value if None)
            region: Fallback routing value for account and match calls
            platform: Fallback platform for summoner, league and spectator calls
            session: Ready-made HTTP client; built from settings if None
            transport: Transport for the built HTTP client (tests pass a MockTransport)
            limiters: Request budget; short and long window from settings if None
            request_callback: Called as ``(metric_name, count)`` per HTTP call
        """
        settings = get_global_settings()
        self.api_key = api_key or settings.riot_api_key
        self.region = region or Region(settings.riot_region.lower())
        self.platform = platform or Platform(settings.riot_platform.lower())
        self.endpoints = RiotAPIEndpoints(self.region, self.platform)
        self.limiters = limiters or build_default_limiters(settings)

        self.session = session or httpx.AsyncClient(
            headers={
                "X-Riot-Token": self.api_key,
                "Accept": "application/json",
                "User-Agent": "rankwatch/1.0",
            },
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            transport=transport,
        )
        self.dispatcher = RequestDispatcher(
            self.session,
            self.limiters,
            poll_interval_seconds=settings.dispatcher_poll_interval_seconds,
            cooldown_seconds=settings.rate_limit_cooldown_seconds,
            request_callback=request_callback,
        )

        logger.info(
            "Riot API client ready",
            region=self.region.value,
            platform=self.platform.value,
            limiters=[repr(limiter) for limiter in self.limiters],
            api_key_set=bool(self.api_key),
        )

    async def __aenter__(self) -> "RiotAPIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self.session.is_closed:
            return
        await self.session.aclose()
        logger.info("Riot API client closed")

    async def _get(self, url: str) -> Any:
        return await self.dispatcher.execute(url)

    async def _get_model(self, url: str, dto: Type[DTO]) -> DTO:
        return dto.model_validate(await self._get(url))

    async def _get_list(self, url: str, what: str) -> List[Any]:
        data = await self._get(url)
        if not isinstance(data, list):
            raise RiotAPIError(
                f"Expected a list of {what}, got {type(data).__name__}", url=url
            )
        return data

    # account-v1
    async def get_account_by_riot_id(
        self, game_name: str, tag_line: str, region: Optional[Region] = None
    ) -> AccountDTO:
        """Resolve ``gameName#tagLine`` to an account (puuid)."""
        url = self.endpoints.account_by_riot_id(game_name, tag_line, region)
        return await self._get_model(url, AccountDTO)

    async def get_account_by_puuid(
        self, puuid: str, region: Optional[Region] = None
    ) -> AccountDTO:
        """Current Riot ID of a puuid."""
        url = self.endpoints.account_by_puuid(puuid, region)
        return await self._get_model(url, AccountDTO)

    # summoner-v4
    async def get_summoner_by_puuid(
        self, puuid: str, platform: Optional[Platform] = None
    ) -> SummonerDTO:
        url = self.endpoints.summoner_by_puuid(puuid, platform)
        return await self._get_model(url, SummonerDTO)

    # league-v4
    async def get_league_entries_by_summoner(
        self, summoner_id: str, platform: Optional[Platform] = None
    ) -> List[LeagueEntryDTO]:
        """Ranked entries (one per queue played) of an encrypted summoner id."""
        url = self.endpoints.league_entries_by_summoner(summoner_id, platform)
        entries = await self._get_list(url, "league entries")
        return [LeagueEntryDTO.model_validate(entry) for entry in entries]

    # match-v5
    async def get_match_ids_by_puuid(
        self,
        puuid: str,
        start: int = 0,
        count: int = 20,
        type: Optional[str] = None,
        region: Optional[Region] = None,
    ) -> List[str]:
        """Match ids of a puuid, newest first."""
        url = self.endpoints.match_ids_by_puuid(puuid, start, count, type, region)
        return [str(match_id) for match_id in await self._get_list(url, "match ids")]

    async def get_match(
        self, match_id: str, region: Optional[Region] = None
    ) -> MatchDTO:
        url = self.endpoints.match_by_id(match_id, region)
        return await self._get_model(url, MatchDTO)

    # spectator-v5
    async def get_active_game(
        self, puuid: str, platform: Optional[Platform] = None
    ) -> Optional[CurrentGameInfoDTO]:
        """Game in progress for a puuid; None when the player is not in game."""
        url = self.endpoints.active_game_by_puuid(puuid, platform)
        try:
            return await self._get_model(url, CurrentGameInfoDTO)
        except NotFoundError:
            return None
