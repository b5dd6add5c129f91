"""
Riot API Gateway - Anti-Corruption Layer for the tracking feature.

This gateway translates Riot API semantics and data structures to our domain
language, isolating the reconciliation loop from external API details.

Transforms:
- Riot API DTOs (camelCase, Riot-specific naming) → Summoner, Match (our naming)
- Multiple API calls → Single domain operation
- Riot's 404 responses → "absent" results (None / unranked)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple, Union

import structlog

from rankwatch.core.enums import MatchStatus, RankedQueue
from rankwatch.core.riot_api.constants import (
    Platform,
    platform_from_match_id,
    region_for_platform,
)
from rankwatch.core.riot_api.errors import NotFoundError
from rankwatch.core.riot_api.models import CurrentGameParticipantDTO, ParticipantDTO
from rankwatch.features.ranks import Rank

from .models import Match, Participant, Summoner
from .transformers import (
    build_teams,
    loadout_from_live_participant,
    loadout_from_participant,
    ranks_from_league_entries,
    split_riot_id,
    summoner_from_dtos,
)

if TYPE_CHECKING:
    from rankwatch.core.riot_api.client import RiotAPIClient
    from .repository import TrackingRepositoryInterface

logger = structlog.get_logger(__name__)

PlatformLike = Union[Platform, str]


def _as_platform(platform: PlatformLike) -> Platform:
    return platform if isinstance(platform, Platform) else Platform(platform.lower())


class RiotAPIGateway:
    """
    Anti-Corruption Layer for Riot API integration.

    Hides external API structure and transforms data to our domain model.
    Participants already tracked are resolved from the repository; everyone
    else is built from the payload and has their rank fetched.
    """

    def __init__(
        self,
        riot_api_client: "RiotAPIClient",
        repository: Optional["TrackingRepositoryInterface"] = None,
    ):
        """
        Initialize gateway with Riot API client.

        :param riot_api_client: Low-level Riot API client
        :param repository: Used to resolve known match participants
        """
        self._client = riot_api_client
        self._repository = repository

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def resolve_identity(
        self, name: str, tag_line: str, platform: PlatformLike
    ) -> str:
        """
        Resolve a Riot ID to a PUUID.

        Raises:
            NotFoundError: If no account has that Riot ID
        """
        region = region_for_platform(platform)
        account = await self._client.get_account_by_riot_id(name, tag_line, region)
        logger.debug(
            "Resolved Riot ID", name=name, tag_line=tag_line, puuid=account.puuid
        )
        return account.puuid

    async def resolve_name_tag(
        self, puuid: str, platform: PlatformLike
    ) -> Tuple[str, str]:
        """Resolve a PUUID back to its current ``(name, tag)``."""
        region = region_for_platform(platform)
        account = await self._client.get_account_by_puuid(puuid, region)
        return account.game_name or "", account.tag_line or ""

    async def fetch_summoner(self, puuid: str, platform: PlatformLike) -> Summoner:
        """
        Fetch account, summoner and ladder data for a PUUID.

        Returns:
            Summoner domain model with current solo and flex ranks

        Raises:
            NotFoundError: If the account or summoner does not exist
        """
        platform_enum = _as_platform(platform)
        account = await self._client.get_account_by_puuid(
            puuid, region_for_platform(platform_enum)
        )
        summoner_dto = await self._client.get_summoner_by_puuid(puuid, platform_enum)

        solo, flex = Rank.unranked(), Rank.unranked()
        if summoner_dto.id:
            solo, flex = await self.fetch_rank(summoner_dto.id, platform_enum)

        summoner = summoner_from_dtos(account, summoner_dto, platform_enum, solo, flex)
        logger.info(
            "Summoner fetched",
            puuid=puuid,
            summoner=summoner.display_name,
            solo_rank=str(solo),
            flex_rank=str(flex),
        )
        return summoner

    # ------------------------------------------------------------------
    # Ladder
    # ------------------------------------------------------------------

    async def fetch_rank(
        self, summoner_id: str, platform: PlatformLike
    ) -> Tuple[Rank, Rank]:
        """
        Fetch the current ``(solo, flex)`` ranks for an encrypted summoner id.

        A summoner without ladder entries (or unknown to league-v4) is unranked
        in both queues.
        """
        try:
            entries = await self._client.get_league_entries_by_summoner(
                summoner_id, _as_platform(platform)
            )
        except NotFoundError:
            logger.debug("No league entries found", summoner_id=summoner_id)
            return Rank.unranked(), Rank.unranked()
        return ranks_from_league_entries(entries)

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    async def fetch_latest_ranked_match_id(
        self, puuid: str, platform: PlatformLike
    ) -> Optional[str]:
        """Most recent ranked match id for a PUUID, or None if there is none."""
        match_ids = await self._client.get_match_ids_by_puuid(
            puuid,
            start=0,
            count=1,
            type="ranked",
            region=region_for_platform(platform),
        )
        return match_ids[0] if match_ids else None

    async def fetch_match(self, match_id: str) -> Match:
        """
        Fetch a finished match and resolve every participant.

        Raises:
            NotFoundError: If the match does not exist
        """
        platform = platform_from_match_id(match_id)
        match_dto = await self._client.get_match(
            match_id, region_for_platform(platform)
        )

        participants: List[Participant] = []
        for dto in match_dto.info.participants:
            summoner = await self._resolve_match_participant(dto, platform)
            participants.append(
                Participant(
                    summoner=summoner,
                    champion_id=dto.champion_id,
                    team_id=dto.team_id,
                    loadout=loadout_from_participant(dto),
                )
            )

        match = Match(
            match_id=match_dto.match_id,
            queue=RankedQueue.from_queue_id(match_dto.info.queue_id),
            status=MatchStatus.FINISHED,
            platform=platform,
            teams=build_teams(participants),
        )
        logger.debug(
            "Match fetched",
            match_id=match.match_id,
            queue=match.queue.value,
            participants=len(participants),
        )
        return match

    async def fetch_live_match(
        self, puuid: str, platform: PlatformLike
    ) -> Optional[Match]:
        """Fetch the game a PUUID is currently playing, or None when not in game."""
        platform_enum = _as_platform(platform)
        game = await self._client.get_active_game(puuid, platform_enum)
        if game is None:
            return None

        queue = RankedQueue.from_queue_id(game.game_queue_config_id)
        participants: List[Participant] = []
        for dto in game.participants:
            summoner = await self._resolve_live_participant(
                dto, platform_enum, fetch_rank=queue.is_ranked
            )
            participants.append(
                Participant(
                    summoner=summoner,
                    champion_id=dto.champion_id,
                    team_id=dto.team_id,
                    loadout=loadout_from_live_participant(dto),
                )
            )

        return Match(
            match_id=str(game.game_id),
            queue=queue,
            status=MatchStatus.ONGOING,
            platform=platform_enum,
            teams=build_teams(participants),
        )

    # ------------------------------------------------------------------
    # Participant resolution
    # ------------------------------------------------------------------

    async def _stored_summoner(self, puuid: str) -> Optional[Summoner]:
        if self._repository is None:
            return None
        return await self._repository.get_summoner(puuid)

    async def _resolve_match_participant(
        self, dto: ParticipantDTO, platform: Platform
    ) -> Summoner:
        """Stored summoner refreshed from the payload, else a fresh one."""
        stored = await self._stored_summoner(dto.puuid)
        if stored is not None:
            stored.name = dto.riot_id_game_name or stored.name
            stored.tag_line = dto.riot_id_tagline or stored.tag_line
            stored.profile_icon_id = dto.profile_icon or stored.profile_icon_id
            return stored

        name, tag_line = dto.riot_id_game_name or "", dto.riot_id_tagline or ""
        if not name:
            name, tag_line = await self.resolve_name_tag(dto.puuid, platform)

        summoner = Summoner(
            puuid=dto.puuid,
            name=name,
            tag_line=tag_line,
            summoner_id=dto.summoner_id,
            profile_icon_id=dto.profile_icon,
            platform=platform,
        )
        await self._attach_rank(summoner)
        return summoner

    async def _resolve_live_participant(
        self, dto: CurrentGameParticipantDTO, platform: Platform, fetch_rank: bool
    ) -> Summoner:
        stored = await self._stored_summoner(dto.puuid)
        if stored is not None:
            return stored

        name, tag_line = split_riot_id(dto.riot_id)
        summoner = Summoner(
            puuid=dto.puuid,
            name=name,
            tag_line=tag_line,
            summoner_id=dto.summoner_id,
            profile_icon_id=dto.profile_icon_id,
            platform=platform,
        )
        if fetch_rank:
            await self._attach_rank(summoner)
        return summoner

    async def _attach_rank(self, summoner: Summoner) -> None:
        """Fill in ranks for an untracked participant."""
        if not summoner.summoner_id:
            try:
                dto = await self._client.get_summoner_by_puuid(
                    summoner.puuid, summoner.platform
                )
            except NotFoundError:
                logger.debug("Participant has no summoner", puuid=summoner.puuid)
                return
            summoner.summoner_id = dto.id
            summoner.profile_icon_id = summoner.profile_icon_id or dto.profile_icon_id

        if summoner.summoner_id:
            summoner.solo_rank, summoner.flex_rank = await self.fetch_rank(
                summoner.summoner_id, summoner.platform
            )
