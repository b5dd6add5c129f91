"""Domain models for summoner tracking.

Plain dataclasses that carry state between the gateway, the repository and the
reconciliation loop. Persistence mapping lives in ``transformers``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from rankwatch.core.enums import MatchStatus, RankedQueue
from rankwatch.core.riot_api.constants import Platform
from rankwatch.features.ranks import Rank


@dataclass
class Summoner:
    """Tracked player, keyed by PUUID."""

    puuid: str
    name: str = ""
    tag_line: str = ""
    summoner_id: Optional[str] = None
    profile_icon_id: int = 0
    solo_rank: Rank = field(default_factory=Rank.unranked)
    flex_rank: Rank = field(default_factory=Rank.unranked)
    platform: Platform = Platform.EUW1
    last_reconciled_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Riot ID as ``name#tag`` (bare name when the tag is unknown)."""
        if self.tag_line:
            return f"{self.name}#{self.tag_line}"
        return self.name

    def rank_for(self, queue: RankedQueue) -> Rank:
        """Current rank in a ranked queue; unranked queues have no rank."""
        if queue is RankedQueue.SOLO:
            return self.solo_rank
        if queue is RankedQueue.FLEX:
            return self.flex_rank
        return Rank.unranked()

    def with_ranks(self, solo_rank: Rank, flex_rank: Rank) -> "Summoner":
        """Copy of this summoner carrying new ranks."""
        return Summoner(
            puuid=self.puuid,
            name=self.name,
            tag_line=self.tag_line,
            summoner_id=self.summoner_id,
            profile_icon_id=self.profile_icon_id,
            solo_rank=solo_rank,
            flex_rank=flex_rank,
            platform=self.platform,
            last_reconciled_at=self.last_reconciled_at,
        )


@dataclass
class Loadout:
    """Items, summoner spells and runes; passed through to renderers untouched."""

    items: List[int] = field(default_factory=list)
    spells: List[int] = field(default_factory=list)
    perk_ids: List[int] = field(default_factory=list)
    perk_style: int = 0
    perk_sub_style: int = 0


@dataclass
class Participant:
    summoner: Summoner
    champion_id: int
    team_id: int
    loadout: Loadout = field(default_factory=Loadout)


@dataclass
class Team:
    team_id: int
    participants: List[Participant] = field(default_factory=list)

    def average_rank(self) -> Rank:
        """Integer mean of the non-zero solo ranks.

        A team without any ranked participant yields ``Rank(0)``, which callers
        must read as insufficient data rather than a literal rank.
        """
        ranked = [
            p.summoner.solo_rank.value
            for p in self.participants
            if p.summoner.solo_rank.is_ranked
        ]
        if not ranked:
            return Rank.unranked()
        return Rank(sum(ranked) // len(ranked))


@dataclass
class Match:
    """Finished or ongoing match with exactly two teams."""

    match_id: str
    queue: RankedQueue
    status: MatchStatus
    platform: Platform
    teams: List[Team] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.teams) != 2:
            raise ValueError(
                f"Match {self.match_id} must have exactly two teams, got {len(self.teams)}"
            )

    @property
    def participants(self) -> List[Participant]:
        return [p for team in self.teams for p in team.participants]

    def participant_for(self, puuid: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.summoner.puuid == puuid:
                return participant
        return None

    def team_of(self, puuid: str) -> Optional[Team]:
        for team in self.teams:
            if any(p.summoner.puuid == puuid for p in team.participants):
                return team
        return None

    def enemy_team_of(self, puuid: str) -> Optional[Team]:
        own = self.team_of(puuid)
        if own is None:
            return None
        return next(team for team in self.teams if team is not own)
