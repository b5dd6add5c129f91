"""Live-match sweep: announce newly observed ranked games once."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

from .error_handling import handle_riot_api_errors
from .models import Match, Participant, Summoner
from .notifications import (
    MatchStartedEvent,
    NotificationSink,
    ParticipantRenderer,
    render_visual,
)

if TYPE_CHECKING:
    from .gateway import RiotAPIGateway
    from .repository import TrackingRepositoryInterface

logger = structlog.get_logger(__name__)


class LiveMatchSweep:
    """Checks whether a summoner is in a ranked game and announces it.

    A game is recorded before it is announced, so a crash mid-announcement
    never produces a second announcement for the same game.
    """

    def __init__(
        self,
        gateway: "RiotAPIGateway",
        repository: "TrackingRepositoryInterface",
        sink: NotificationSink,
        renderer: Optional[ParticipantRenderer] = None,
    ):
        self.gateway = gateway
        self.repository = repository
        self.sink = sink
        self.renderer = renderer

    async def run(self, summoner: Summoner) -> Optional[Match]:
        """
        Sweep one summoner.

        Returns:
            The newly announced match, or None when nothing was announced
        """
        match = await self.gateway.fetch_live_match(summoner.puuid, summoner.platform)
        if match is None:
            logger.debug("Summoner not in game", puuid=summoner.puuid)
            return None

        if not match.queue.is_ranked:
            logger.debug(
                "Ignoring live match in unranked queue",
                puuid=summoner.puuid,
                game_id=match.match_id,
            )
            return None

        if await self.repository.is_live_match_recorded(match.match_id):
            logger.debug("Live match already announced", game_id=match.match_id)
            return None

        await self.repository.record_live_match(match)
        logger.info(
            "New live match detected",
            game_id=match.match_id,
            queue=match.queue.value,
            puuid=summoner.puuid,
        )

        for participant in match.participants:
            await self._announce_participant(participant, match)

        return match

    @handle_riot_api_errors(
        operation="announce live match to participant",
        critical=False,
        log_context=lambda self, participant, match: {
            "puuid": participant.summoner.puuid,
            "game_id": match.match_id,
        },
    )
    async def _announce_participant(self, participant: Participant, match: Match) -> None:
        destinations = await self.repository.list_notification_destinations(
            participant.summoner.puuid
        )
        if not destinations:
            return

        own_team = match.team_of(participant.summoner.puuid)
        enemy_team = match.enemy_team_of(participant.summoner.puuid)
        own_average = own_team.average_rank()
        enemy_average = enemy_team.average_rank()

        event = MatchStartedEvent(
            summoner_name=participant.summoner.display_name,
            puuid=participant.summoner.puuid,
            queue=match.queue,
            current_rank=participant.summoner.rank_for(match.queue).to_display_string(),
            team_average_rank=own_average.to_display_string(),
            enemy_average_rank=enemy_average.to_display_string(),
            insufficient_rank_data=not (
                own_average.is_ranked and enemy_average.is_ranked
            ),
            champion_id=participant.champion_id,
            game_id=match.match_id,
            visual=await render_visual(self.renderer, participant),
        )

        for destination in destinations:
            await self.sink.emit(destination, event)
