"""Pydantic models for Riot API response data.

Unknown fields are ignored so new response attributes never break parsing.
"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class AccountDTO(BaseModel):
    """Riot Account information."""

    puuid: str
    game_name: Optional[str] = Field(None, alias="gameName")
    tag_line: Optional[str] = Field(None, alias="tagLine")

    model_config = ConfigDict(populate_by_name=True)


class SummonerDTO(BaseModel):
    """League of Legends Summoner information."""

    id: Optional[str] = None
    account_id: Optional[str] = Field(None, alias="accountId")
    puuid: str
    profile_icon_id: int = Field(0, alias="profileIconId")
    summoner_level: Optional[int] = Field(None, alias="summonerLevel")

    model_config = ConfigDict(populate_by_name=True)


class LeagueEntryDTO(BaseModel):
    """League entry information."""

    queue_type: str = Field(..., alias="queueType")
    tier: str
    rank: str
    league_points: int = Field(..., alias="leaguePoints")
    wins: int = 0
    losses: int = 0
    league_id: Optional[str] = Field(None, alias="leagueId")
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    puuid: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class PerkSelectionDTO(BaseModel):
    """Single rune selection inside a perk style."""

    perk: int


class PerkStyleDTO(BaseModel):
    """Primary or secondary rune tree."""

    description: Optional[str] = None
    style: int
    selections: List[PerkSelectionDTO] = Field(default_factory=list)


class MatchPerksDTO(BaseModel):
    """Runes as reported by match-v5."""

    styles: List[PerkStyleDTO] = Field(default_factory=list)


class ParticipantDTO(BaseModel):
    """Match participant information."""

    puuid: str
    team_id: int = Field(..., alias="teamId")
    champion_id: int = Field(..., alias="championId")
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    riot_id_game_name: Optional[str] = Field(None, alias="riotIdGameName")
    riot_id_tagline: Optional[str] = Field(None, alias="riotIdTagline")
    profile_icon: int = Field(0, alias="profileIcon")
    summoner1_id: int = Field(0, alias="summoner1Id")
    summoner2_id: int = Field(0, alias="summoner2Id")
    item0: int = 0
    item1: int = 0
    item2: int = 0
    item3: int = 0
    item4: int = 0
    item5: int = 0
    item6: int = 0
    perks: MatchPerksDTO = Field(default_factory=MatchPerksDTO)

    @property
    def item_ids(self) -> List[int]:
        """Item slots 0-6 in order."""
        return [
            self.item0,
            self.item1,
            self.item2,
            self.item3,
            self.item4,
            self.item5,
            self.item6,
        ]

    model_config = ConfigDict(populate_by_name=True)


class MatchInfoDTO(BaseModel):
    """Match information."""

    queue_id: int = Field(..., alias="queueId")
    game_id: Optional[int] = Field(None, alias="gameId")
    platform_id: Optional[str] = Field(None, alias="platformId")
    game_creation: Optional[int] = Field(None, alias="gameCreation")
    game_duration: Optional[int] = Field(None, alias="gameDuration")
    participants: List[ParticipantDTO]

    model_config = ConfigDict(populate_by_name=True)


class MatchMetadataDTO(BaseModel):
    """Match metadata."""

    match_id: str = Field(..., alias="matchId")
    participants: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class MatchDTO(BaseModel):
    """Complete match data."""

    metadata: MatchMetadataDTO
    info: MatchInfoDTO

    @property
    def match_id(self) -> str:
        """Get match ID from metadata."""
        return self.metadata.match_id

    model_config = ConfigDict(populate_by_name=True)


class LivePerksDTO(BaseModel):
    """Runes as reported by spectator-v5."""

    perk_ids: List[int] = Field(default_factory=list, alias="perkIds")
    perk_style: int = Field(0, alias="perkStyle")
    perk_sub_style: int = Field(0, alias="perkSubStyle")

    model_config = ConfigDict(populate_by_name=True)


class CurrentGameParticipantDTO(BaseModel):
    """Participant of a game in progress."""

    puuid: str
    team_id: int = Field(..., alias="teamId")
    champion_id: int = Field(..., alias="championId")
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    riot_id: Optional[str] = Field(None, alias="riotId")
    profile_icon_id: int = Field(0, alias="profileIconId")
    spell1_id: int = Field(0, alias="spell1Id")
    spell2_id: int = Field(0, alias="spell2Id")
    perks: LivePerksDTO = Field(default_factory=LivePerksDTO)

    model_config = ConfigDict(populate_by_name=True)


class CurrentGameInfoDTO(BaseModel):
    """Live game snapshot from spectator-v5."""

    game_id: int = Field(..., alias="gameId")
    game_queue_config_id: Optional[int] = Field(None, alias="gameQueueConfigId")
    platform_id: Optional[str] = Field(None, alias="platformId")
    game_start_time: Optional[int] = Field(None, alias="gameStartTime")
    participants: List[CurrentGameParticipantDTO]

    model_config = ConfigDict(populate_by_name=True)
