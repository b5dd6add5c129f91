"""Shared fixtures: in-memory database, repository and domain factories."""

from typing import List, Optional

import pytest
from sqlalchemy.pool import StaticPool

from rankwatch.core.database import DatabaseManager
from rankwatch.core.enums import MatchStatus, RankedQueue
from rankwatch.core.riot_api.constants import Platform
from rankwatch.features.ranks import Rank
from rankwatch.features.tracking.models import Loadout, Match, Participant, Summoner
from rankwatch.features.tracking.repository import SQLAlchemyTrackingRepository
from rankwatch.features.tracking.transformers import build_teams


@pytest.fixture
async def db_manager():
    manager = DatabaseManager(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def repository(db_manager):
    return SQLAlchemyTrackingRepository(db_manager.async_session_factory)


def make_summoner(
    puuid: str,
    name: Optional[str] = None,
    solo: str = "UNRANKED",
    flex: str = "UNRANKED",
    summoner_id: Optional[str] = "auto",
    **kwargs,
) -> Summoner:
    return Summoner(
        puuid=puuid,
        name=name or puuid.capitalize(),
        tag_line="EUW",
        summoner_id=f"sid-{puuid}" if summoner_id == "auto" else summoner_id,
        solo_rank=Rank.from_display_string(solo),
        flex_rank=Rank.from_display_string(flex),
        platform=Platform.EUW1,
        **kwargs,
    )


def make_match(
    match_id: str,
    blue: List[Summoner],
    red: List[Summoner],
    queue: RankedQueue = RankedQueue.SOLO,
    status: MatchStatus = MatchStatus.FINISHED,
) -> Match:
    participants = [
        Participant(summoner=s, champion_id=100 + i, team_id=100, loadout=Loadout())
        for i, s in enumerate(blue)
    ] + [
        Participant(summoner=s, champion_id=200 + i, team_id=200, loadout=Loadout())
        for i, s in enumerate(red)
    ]
    return Match(
        match_id=match_id,
        queue=queue,
        status=status,
        platform=Platform.EUW1,
        teams=build_teams(participants),
    )


@pytest.fixture
def summoner_factory():
    return make_summoner


@pytest.fixture
def match_factory():
    return make_match


class RecordingSink:
    """Notification sink collecting (destination, event) pairs."""

    def __init__(self):
        self.emitted = []

    async def emit(self, destination, event):
        self.emitted.append((destination, event))


@pytest.fixture
def sink():
    return RecordingSink()
