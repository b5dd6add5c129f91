"""Tracking service: onboarding and offboarding of summoners.

Thin orchestration layer:
- Validates Riot IDs before they reach the API or the database
- Reuses stored summoners, otherwise resolves them through RiotAPIGateway
- Maps summoners to notification destinations via the repository
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import structlog

from rankwatch.core.exceptions import (
    SummonerNotFoundError,
    TrackingServiceError,
    ValidationError,
)
from rankwatch.core.riot_api.constants import Platform
from rankwatch.core.riot_api.errors import NotFoundError, RiotAPIError

from .models import Summoner

if TYPE_CHECKING:
    from .gateway import RiotAPIGateway
    from .repository import TrackingRepositoryInterface

logger = structlog.get_logger(__name__)

# Characters that never appear in a Riot ID; tag lines also reject spaces
INVALID_NAME_CHARACTERS = set("!@#$%^&*()+=[]{}|\\;:'\",<>/?")
INVALID_TAG_CHARACTERS = INVALID_NAME_CHARACTERS | {" "}


def validate_riot_id(name: str, tag_line: str) -> None:
    """
    Reject Riot IDs containing characters the Riot ID format does not allow.

    Raises:
        ValidationError: If name or tag line is empty or contains invalid characters
    """
    if not name or not name.strip():
        raise ValidationError("Name must not be empty", field="name", value=name)
    if not tag_line or not tag_line.strip():
        raise ValidationError(
            "Tag line must not be empty", field="tag_line", value=tag_line
        )
    if INVALID_NAME_CHARACTERS.intersection(name) or "--" in name:
        raise ValidationError(
            "Name contains invalid characters", field="name", value=name
        )
    if INVALID_TAG_CHARACTERS.intersection(tag_line) or "--" in tag_line:
        raise ValidationError(
            "Tag line contains invalid characters", field="tag_line", value=tag_line
        )


def _as_platform(platform: Union[Platform, str]) -> Platform:
    if isinstance(platform, Platform):
        return platform
    try:
        return Platform(platform.lower())
    except ValueError:
        raise ValidationError(
            f"Unknown platform: {platform}", field="platform", value=platform
        )


class TrackingService:
    """Service for tracking and untracking summoners per destination."""

    def __init__(
        self,
        repository: "TrackingRepositoryInterface",
        riot_gateway: "RiotAPIGateway",
    ):
        """Initialize tracking service.

        :param repository: Tracking persistence
        :param riot_gateway: Anti-Corruption Layer for Riot API
        """
        self.repository = repository
        self.riot_gateway = riot_gateway

    async def track_summoner(
        self,
        name: str,
        tag_line: str,
        platform: Union[Platform, str],
        channel_id: str,
    ) -> Summoner:
        """Start sending a summoner's notifications to ``channel_id``.

        :returns: The stored summoner
        :raises ValidationError: On a malformed Riot ID or platform
        :raises SummonerNotFoundError: If the Riot ID does not exist
        :raises TrackingServiceError: If the summoner is already tracked there
            or the Riot API fails
        """
        validate_riot_id(name, tag_line)
        platform_enum = _as_platform(platform)
        context = {
            "name": name,
            "tag_line": tag_line,
            "platform": platform_enum.value,
            "channel_id": channel_id,
        }
        logger.info("Onboarding summoner", **context)

        summoner = await self.repository.find_summoner_by_riot_id(
            name, tag_line, platform_enum.value
        )
        if summoner is None:
            summoner = await self._fetch_new_summoner(
                name, tag_line, platform_enum, context
            )
            summoner = await self.repository.upsert_summoner(summoner)
            logger.info(
                "Summoner stored",
                puuid=summoner.puuid,
                solo_rank=str(summoner.solo_rank),
                flex_rank=str(summoner.flex_rank),
            )
        else:
            logger.info("Summoner already stored", puuid=summoner.puuid)

        added = await self.repository.add_notification_destination(
            summoner.puuid, channel_id
        )
        if not added:
            raise TrackingServiceError(
                f"{summoner.display_name} is already tracked in this channel",
                operation="track_summoner",
                context=context,
            )

        return summoner

    async def _fetch_new_summoner(
        self, name: str, tag_line: str, platform: Platform, context: dict
    ) -> Summoner:
        try:
            puuid = await self.riot_gateway.resolve_identity(name, tag_line, platform)
            return await self.riot_gateway.fetch_summoner(puuid, platform)
        except NotFoundError as e:
            raise SummonerNotFoundError(
                f"Summoner {name}#{tag_line} not found",
                operation="track_summoner",
                context=context,
                original_error=e,
            )
        except RiotAPIError as e:
            logger.error("Failed to fetch summoner", error=str(e), **context)
            raise TrackingServiceError(
                "Failed to fetch summoner data",
                operation="track_summoner",
                context=context,
                original_error=e,
            )

    async def untrack_summoner(
        self,
        name: str,
        tag_line: str,
        platform: Union[Platform, str],
        channel_id: str,
    ) -> None:
        """Stop sending a summoner's notifications to ``channel_id``.

        The summoner row is kept; a summoner without destinations is simply
        never selected by the reconciliation loop.

        :raises ValidationError: On a malformed Riot ID or platform
        :raises SummonerNotFoundError: If the summoner is not tracked in the channel
        """
        validate_riot_id(name, tag_line)
        platform_enum = _as_platform(platform)
        context = {
            "name": name,
            "tag_line": tag_line,
            "platform": platform_enum.value,
            "channel_id": channel_id,
        }

        summoner = await self.repository.find_summoner_by_riot_id(
            name, tag_line, platform_enum.value
        )
        removed = False
        if summoner is not None:
            removed = await self.repository.remove_notification_destination(
                summoner.puuid, channel_id
            )
        if not removed:
            raise SummonerNotFoundError(
                f"Summoner {name}#{tag_line} is not tracked in this channel",
                operation="untrack_summoner",
                context=context,
            )

        logger.info("Summoner untracked", puuid=summoner.puuid, **context)
