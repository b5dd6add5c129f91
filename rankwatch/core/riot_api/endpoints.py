"""URL builders for the Riot API endpoints rankwatch calls.

account-v1 and match-v5 are routed by region (``europe``); summoner-v4,
league-v4 and spectator-v5 by platform (``euw1``).
"""

from typing import Optional
from urllib.parse import quote, urlencode

from .constants import Platform, Region

HOST = "https://{route}.api.riotgames.com"


class RiotAPIEndpoints:
    """Builds absolute URLs, falling back to a default region and platform."""

    def __init__(
        self, region: Region = Region.EUROPE, platform: Platform = Platform.EUW1
    ):
        self.region = region
        self.platform = platform

    def regional(self, path: str, region: Optional[Region] = None) -> str:
        return HOST.format(route=(region or self.region).value) + path

    def platform_scoped(self, path: str, platform: Optional[Platform] = None) -> str:
        return HOST.format(route=(platform or self.platform).value) + path

    def account_by_riot_id(
        self, game_name: str, tag_line: str, region: Optional[Region] = None
    ) -> str:
        name = quote(game_name, safe="")
        tag = quote(tag_line, safe="")
        return self.regional(f"/riot/account/v1/accounts/by-riot-id/{name}/{tag}", region)

    def account_by_puuid(self, puuid: str, region: Optional[Region] = None) -> str:
        return self.regional(f"/riot/account/v1/accounts/by-puuid/{puuid}", region)

    def summoner_by_puuid(self, puuid: str, platform: Optional[Platform] = None) -> str:
        return self.platform_scoped(
            f"/lol/summoner/v4/summoners/by-puuid/{puuid}", platform
        )

    def league_entries_by_summoner(
        self, summoner_id: str, platform: Optional[Platform] = None
    ) -> str:
        return self.platform_scoped(
            f"/lol/league/v4/entries/by-summoner/{summoner_id}", platform
        )

    def match_ids_by_puuid(
        self,
        puuid: str,
        start: int = 0,
        count: int = 20,
        type: Optional[str] = None,
        region: Optional[Region] = None,
    ) -> str:
        """Newest-first match id listing; ``type`` filters e.g. ``ranked``."""
        query = {"start": start, "count": count}
        if type:
            query["type"] = type
        path = f"/lol/match/v5/matches/by-puuid/{puuid}/ids?{urlencode(query)}"
        return self.regional(path, region)

    def match_by_id(self, match_id: str, region: Optional[Region] = None) -> str:
        return self.regional(f"/lol/match/v5/matches/{match_id}", region)

    def active_game_by_puuid(
        self, puuid: str, platform: Optional[Platform] = None
    ) -> str:
        return self.platform_scoped(
            f"/lol/spectator/v5/active-games/by-summoner/{puuid}", platform
        )
