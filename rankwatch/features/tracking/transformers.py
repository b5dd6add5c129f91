"""Transformers for converting between layers in the tracking feature.

This module provides transformation functions for:
- Riot API DTOs → domain models (Anti-Corruption Layer)
- domain models ↔ ORM rows and JSON match payloads (Data Mapper)
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rankwatch.core.enums import RankedQueue
from rankwatch.core.riot_api.constants import Platform
from rankwatch.core.riot_api.models import (
    AccountDTO,
    CurrentGameParticipantDTO,
    LeagueEntryDTO,
    ParticipantDTO,
    SummonerDTO,
)
from rankwatch.features.ranks import Rank

from .models import Loadout, Participant, Summoner, Team
from .orm_models import SummonerORM

BLUE_TEAM_ID = 100
RED_TEAM_ID = 200


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by some drivers) as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Riot API DTOs → domain
# ============================================================================


def ranks_from_league_entries(entries: Iterable[LeagueEntryDTO]) -> Tuple[Rank, Rank]:
    """Pick the solo and flex ranks out of a league-v4 entry list.

    :param entries: League entries for one summoner
    :returns: ``(solo, flex)``; a missing queue is unranked
    """
    solo = Rank.unranked()
    flex = Rank.unranked()
    for entry in entries:
        queue = RankedQueue.from_league_queue(entry.queue_type)
        rank = Rank.from_league_entry(entry.tier, entry.rank, entry.league_points)
        if queue is RankedQueue.SOLO:
            solo = rank
        elif queue is RankedQueue.FLEX:
            flex = rank
    return solo, flex


def summoner_from_dtos(
    account: AccountDTO,
    summoner: SummonerDTO,
    platform: Platform,
    solo_rank: Optional[Rank] = None,
    flex_rank: Optional[Rank] = None,
) -> Summoner:
    """Build a domain summoner from account-v1 and summoner-v4 responses."""
    return Summoner(
        puuid=account.puuid,
        name=account.game_name or "",
        tag_line=account.tag_line or "",
        summoner_id=summoner.id,
        profile_icon_id=summoner.profile_icon_id,
        solo_rank=solo_rank or Rank.unranked(),
        flex_rank=flex_rank or Rank.unranked(),
        platform=platform,
    )


def loadout_from_participant(dto: ParticipantDTO) -> Loadout:
    """Loadout of a finished-match participant."""
    styles = dto.perks.styles
    return Loadout(
        items=dto.item_ids,
        spells=[dto.summoner1_id, dto.summoner2_id],
        perk_ids=[sel.perk for style in styles for sel in style.selections],
        perk_style=styles[0].style if styles else 0,
        perk_sub_style=styles[1].style if len(styles) > 1 else 0,
    )


def loadout_from_live_participant(dto: CurrentGameParticipantDTO) -> Loadout:
    """Loadout of a live-game participant (no items yet)."""
    return Loadout(
        items=[],
        spells=[dto.spell1_id, dto.spell2_id],
        perk_ids=list(dto.perks.perk_ids),
        perk_style=dto.perks.perk_style,
        perk_sub_style=dto.perks.perk_sub_style,
    )


def split_riot_id(riot_id: Optional[str]) -> Tuple[str, str]:
    """Split ``name#tag`` into its parts; missing parts are empty strings."""
    if not riot_id:
        return "", ""
    name, _, tag = riot_id.partition("#")
    return name, tag


def build_teams(participants: Iterable[Participant]) -> List[Team]:
    """Group participants into the blue and red side, preserving order."""
    blue = Team(team_id=BLUE_TEAM_ID)
    red = Team(team_id=RED_TEAM_ID)
    for participant in participants:
        team = blue if participant.team_id == BLUE_TEAM_ID else red
        team.participants.append(participant)
    return [blue, red]


# ============================================================================
# Domain ↔ persistence
# ============================================================================


def summoner_orm_to_domain(row: SummonerORM) -> Summoner:
    """Transform a SummonerORM row to the domain summoner."""
    return Summoner(
        puuid=row.puuid,
        name=row.name or "",
        tag_line=row.tag_line or "",
        summoner_id=row.summoner_id,
        profile_icon_id=row.profile_icon_id or 0,
        solo_rank=Rank(row.solo_rank or 0),
        flex_rank=Rank(row.flex_rank or 0),
        platform=Platform(row.platform.lower()),
        last_reconciled_at=ensure_aware(row.last_reconciled_at),
    )


def summoner_to_orm(summoner: Summoner) -> SummonerORM:
    """Transform a domain summoner to a detached SummonerORM for ``merge``."""
    return SummonerORM(
        puuid=summoner.puuid,
        name=summoner.name,
        tag_line=summoner.tag_line,
        summoner_id=summoner.summoner_id,
        profile_icon_id=summoner.profile_icon_id,
        solo_rank=summoner.solo_rank.value,
        flex_rank=summoner.flex_rank.value,
        platform=summoner.platform.value,
        last_reconciled_at=summoner.last_reconciled_at,
    )


def teams_to_payload(teams: Iterable[Team]) -> List[Dict[str, Any]]:
    """Serialize teams for the JSON ``matches.teams`` column."""
    return [
        {
            "team_id": team.team_id,
            "participants": [
                {
                    "puuid": p.summoner.puuid,
                    "name": p.summoner.name,
                    "tag_line": p.summoner.tag_line,
                    "champion_id": p.champion_id,
                    "solo_rank": p.summoner.solo_rank.value,
                    "flex_rank": p.summoner.flex_rank.value,
                    "items": list(p.loadout.items),
                    "spells": list(p.loadout.spells),
                    "perk_ids": list(p.loadout.perk_ids),
                    "perk_style": p.loadout.perk_style,
                    "perk_sub_style": p.loadout.perk_sub_style,
                }
                for p in team.participants
            ],
        }
        for team in teams
    ]
