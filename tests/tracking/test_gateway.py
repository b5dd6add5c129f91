"""
Tests for the Riot API gateway (anti-corruption layer).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from rankwatch.core.enums import MatchStatus, RankedQueue
from rankwatch.core.riot_api.constants import Platform, Region
from rankwatch.core.riot_api.errors import NotFoundError, ServiceUnavailableError
from rankwatch.core.riot_api.models import (
    AccountDTO,
    CurrentGameInfoDTO,
    LeagueEntryDTO,
    MatchDTO,
    SummonerDTO,
)
from rankwatch.features.tracking.gateway import RiotAPIGateway

from ..conftest import make_summoner


def league_entry(queue_type: str, tier: str, rank: str, lp: int) -> LeagueEntryDTO:
    return LeagueEntryDTO.model_validate(
        {"queueType": queue_type, "tier": tier, "rank": rank, "leaguePoints": lp}
    )


def match_dto(queue_id: int = 420) -> MatchDTO:
    participants = [
        {
            "puuid": f"p{i}",
            "teamId": 100 if i < 5 else 200,
            "championId": i,
            "summonerId": f"sid-p{i}",
            "riotIdGameName": f"Name{i}",
            "riotIdTagline": "EUW",
            "profileIcon": 10 + i,
        }
        for i in range(10)
    ]
    return MatchDTO.model_validate(
        {
            "metadata": {"matchId": "EUW1_555", "participants": []},
            "info": {"queueId": queue_id, "participants": participants},
        }
    )


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.get_account_by_riot_id = AsyncMock()
    client.get_account_by_puuid = AsyncMock()
    client.get_summoner_by_puuid = AsyncMock()
    client.get_league_entries_by_summoner = AsyncMock(return_value=[])
    client.get_match_ids_by_puuid = AsyncMock(return_value=[])
    client.get_match = AsyncMock()
    client.get_active_game = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_repository():
    repository = MagicMock()
    repository.get_summoner = AsyncMock(return_value=None)
    return repository


@pytest.fixture
def gateway(mock_client, mock_repository):
    return RiotAPIGateway(mock_client, mock_repository)


class TestIdentity:
    """Test cases for identity resolution."""

    @pytest.mark.asyncio
    async def test_resolve_identity_routes_to_region(self, gateway, mock_client):
        mock_client.get_account_by_riot_id.return_value = AccountDTO(puuid="p1")

        puuid = await gateway.resolve_identity("Alpha", "EUW", "euw1")

        assert puuid == "p1"
        mock_client.get_account_by_riot_id.assert_awaited_once_with(
            "Alpha", "EUW", Region.EUROPE
        )

    @pytest.mark.asyncio
    async def test_resolve_name_tag(self, gateway, mock_client):
        mock_client.get_account_by_puuid.return_value = AccountDTO(
            puuid="p1", game_name="Alpha", tag_line="EUW"
        )

        assert await gateway.resolve_name_tag("p1", Platform.NA1) == ("Alpha", "EUW")
        mock_client.get_account_by_puuid.assert_awaited_once_with("p1", Region.AMERICAS)

    @pytest.mark.asyncio
    async def test_fetch_summoner(self, gateway, mock_client):
        mock_client.get_account_by_puuid.return_value = AccountDTO(
            puuid="p1", game_name="Alpha", tag_line="EUW"
        )
        mock_client.get_summoner_by_puuid.return_value = SummonerDTO(
            id="s1", puuid="p1", profile_icon_id=42
        )
        mock_client.get_league_entries_by_summoner.return_value = [
            league_entry("RANKED_SOLO_5x5", "GOLD", "IV", 20),
        ]

        summoner = await gateway.fetch_summoner("p1", "euw1")

        assert summoner.display_name == "Alpha#EUW"
        assert summoner.summoner_id == "s1"
        assert summoner.profile_icon_id == 42
        assert str(summoner.solo_rank) == "GOLD IV 20 LP"
        assert not summoner.flex_rank.is_ranked


class TestRanks:
    """Test cases for ladder lookups."""

    @pytest.mark.asyncio
    async def test_fetch_rank_picks_both_queues(self, gateway, mock_client):
        mock_client.get_league_entries_by_summoner.return_value = [
            league_entry("RANKED_FLEX_SR", "SILVER", "II", 60),
            league_entry("CHERRY", "GOLD", "I", 0),
            league_entry("RANKED_SOLO_5x5", "MASTER", "I", 250),
        ]

        solo, flex = await gateway.fetch_rank("s1", Platform.EUW1)

        assert str(solo) == "MASTER I 99 LP"
        assert str(flex) == "SILVER II 60 LP"

    @pytest.mark.asyncio
    async def test_fetch_rank_not_found_is_unranked(self, gateway, mock_client):
        mock_client.get_league_entries_by_summoner.side_effect = NotFoundError(
            "Resource not found", status_code=404
        )

        solo, flex = await gateway.fetch_rank("s1", Platform.EUW1)

        assert not solo.is_ranked
        assert not flex.is_ranked

    @pytest.mark.asyncio
    async def test_fetch_rank_other_errors_propagate(self, gateway, mock_client):
        mock_client.get_league_entries_by_summoner.side_effect = ServiceUnavailableError(
            "Service unavailable", status_code=503
        )

        with pytest.raises(ServiceUnavailableError):
            await gateway.fetch_rank("s1", Platform.EUW1)


class TestMatches:
    """Test cases for match assembly."""

    @pytest.mark.asyncio
    async def test_latest_ranked_match_id(self, gateway, mock_client):
        mock_client.get_match_ids_by_puuid.return_value = ["EUW1_2"]

        assert await gateway.fetch_latest_ranked_match_id("p1", "euw1") == "EUW1_2"
        mock_client.get_match_ids_by_puuid.assert_awaited_once_with(
            "p1", start=0, count=1, type="ranked", region=Region.EUROPE
        )

    @pytest.mark.asyncio
    async def test_latest_ranked_match_id_empty(self, gateway):
        assert await gateway.fetch_latest_ranked_match_id("p1", "euw1") is None

    @pytest.mark.asyncio
    async def test_fetch_match_resolves_participants(
        self, gateway, mock_client, mock_repository
    ):
        """Test stored participants are refreshed and others get fetched ranks."""
        mock_client.get_match.return_value = match_dto()
        stored = make_summoner("p0", name="OldName", solo="GOLD IV 20 LP")
        mock_repository.get_summoner.side_effect = (
            lambda puuid: stored if puuid == "p0" else None
        )
        mock_client.get_league_entries_by_summoner.return_value = [
            league_entry("RANKED_SOLO_5x5", "SILVER", "I", 10),
        ]

        match = await gateway.fetch_match("EUW1_555")

        assert match.match_id == "EUW1_555"
        assert match.queue is RankedQueue.SOLO
        assert match.status is MatchStatus.FINISHED
        assert [len(team.participants) for team in match.teams] == [5, 5]

        own = match.participant_for("p0")
        assert own.summoner is stored
        assert own.summoner.name == "Name0"
        assert own.summoner.profile_icon_id == 10
        assert str(own.summoner.solo_rank) == "GOLD IV 20 LP"

        other = match.participant_for("p7")
        assert other.team_id == 200
        assert str(other.summoner.solo_rank) == "SILVER I 10 LP"
        # one ladder lookup per untracked participant
        assert mock_client.get_league_entries_by_summoner.await_count == 9
        mock_client.get_match.assert_awaited_once_with("EUW1_555", Region.EUROPE)

    @pytest.mark.asyncio
    async def test_fetch_match_unranked_queue(self, gateway, mock_client):
        mock_client.get_match.return_value = match_dto(queue_id=450)

        match = await gateway.fetch_match("EUW1_555")

        assert match.queue is RankedQueue.UNRANKED
        assert not match.queue.is_ranked

    @pytest.mark.asyncio
    async def test_fetch_live_match_not_in_game(self, gateway):
        assert await gateway.fetch_live_match("p1", "euw1") is None

    @pytest.mark.asyncio
    async def test_fetch_live_match(self, gateway, mock_client):
        mock_client.get_active_game.return_value = CurrentGameInfoDTO.model_validate(
            {
                "gameId": 777,
                "gameQueueConfigId": 440,
                "participants": [
                    {"puuid": "p1", "teamId": 100, "championId": 1, "riotId": "Alpha#EUW",
                     "summonerId": "s1", "spell1Id": 4, "spell2Id": 7},
                    {"puuid": "p2", "teamId": 200, "championId": 2, "riotId": "Beta#EUW",
                     "summonerId": "s2"},
                ],
            }
        )

        match = await gateway.fetch_live_match("p1", Platform.EUW1)

        assert match.match_id == "777"
        assert match.queue is RankedQueue.FLEX
        assert match.status is MatchStatus.ONGOING
        first = match.participant_for("p1")
        assert first.summoner.display_name == "Alpha#EUW"
        assert first.loadout.spells == [4, 7]
        assert match.enemy_team_of("p1").participants[0].summoner.puuid == "p2"

    @pytest.mark.asyncio
    async def test_fetch_live_match_unranked_skips_rank_lookups(
        self, gateway, mock_client
    ):
        mock_client.get_active_game.return_value = CurrentGameInfoDTO.model_validate(
            {
                "gameId": 778,
                "gameQueueConfigId": 450,
                "participants": [
                    {"puuid": "p1", "teamId": 100, "championId": 1, "summonerId": "s1"},
                ],
            }
        )

        match = await gateway.fetch_live_match("p1", Platform.EUW1)

        assert match.queue is RankedQueue.UNRANKED
        mock_client.get_league_entries_by_summoner.assert_not_awaited()
