"""Notification events and the collaborators that deliver them."""

from typing import Optional, Protocol, Union, runtime_checkable

import structlog
from pydantic import BaseModel, Field

from rankwatch.core.enums import RankedQueue
from rankwatch.features.ranks import Rank, format_delta

from .models import Match, Participant, Summoner

logger = structlog.get_logger(__name__)


class RankChangeEvent(BaseModel):
    """A tracked summoner moved on the ladder."""

    summoner_name: str
    puuid: str
    queue: RankedQueue
    old_rank: str
    new_rank: str
    delta: int
    delta_display: str
    match_id: Optional[str] = None
    champion_id: Optional[int] = None
    visual: Optional[bytes] = Field(default=None, repr=False)

    @classmethod
    def build(
        cls,
        summoner: Summoner,
        queue: RankedQueue,
        old_rank: Rank,
        new_rank: Rank,
        participant: Optional[Participant] = None,
        match: Optional[Match] = None,
        visual: Optional[bytes] = None,
    ) -> "RankChangeEvent":
        delta = new_rank.delta(old_rank)
        return cls(
            summoner_name=summoner.display_name,
            puuid=summoner.puuid,
            queue=queue,
            old_rank=old_rank.to_display_string(),
            new_rank=new_rank.to_display_string(),
            delta=delta,
            delta_display=format_delta(delta),
            match_id=match.match_id if match else None,
            champion_id=participant.champion_id if participant else None,
            visual=visual,
        )


class MatchStartedEvent(BaseModel):
    """A tracked summoner entered a ranked game."""

    summoner_name: str
    puuid: str
    queue: RankedQueue
    current_rank: str
    team_average_rank: str
    enemy_average_rank: str
    insufficient_rank_data: bool = False
    champion_id: int
    game_id: str
    visual: Optional[bytes] = Field(default=None, repr=False)


NotificationEvent = Union[RankChangeEvent, MatchStartedEvent]


@runtime_checkable
class NotificationSink(Protocol):
    """Delivers events to a destination (e.g. a chat channel)."""

    async def emit(self, destination: str, event: NotificationEvent) -> None: ...


@runtime_checkable
class ParticipantRenderer(Protocol):
    """Renders a participant's loadout into an image."""

    async def render(self, participant: Participant) -> bytes: ...


class LoggingNotificationSink:
    """Sink that writes every event to the structured log."""

    async def emit(self, destination: str, event: NotificationEvent) -> None:
        logger.info(
            "Notification emitted",
            destination=destination,
            event_type=type(event).__name__,
            **event.model_dump(mode="json", exclude={"visual"}),
        )


async def render_visual(
    renderer: Optional[ParticipantRenderer], participant: Optional[Participant]
) -> Optional[bytes]:
    """Render a participant, or None when rendering is unavailable or fails."""
    if renderer is None or participant is None:
        return None
    try:
        return await renderer.render(participant)
    except Exception as e:
        logger.warning(
            "Participant rendering failed, sending without visual",
            puuid=participant.summoner.puuid,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None
