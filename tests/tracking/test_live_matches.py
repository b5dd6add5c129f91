"""
Tests for the live-match sweep.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from rankwatch.core.enums import MatchStatus, RankedQueue
from rankwatch.features.tracking.live_matches import LiveMatchSweep

from ..conftest import make_match, make_summoner


@pytest.fixture
def gateway():
    gw = MagicMock()
    gw.fetch_live_match = AsyncMock(return_value=None)
    return gw


@pytest.fixture
def sweep(gateway, repository, sink):
    return LiveMatchSweep(gateway, repository, sink)


def live_match(blue, red, queue=RankedQueue.SOLO, game_id="4242"):
    return make_match(game_id, blue, red, queue=queue, status=MatchStatus.ONGOING)


class TestLiveMatchSweep:
    """Test cases for LiveMatchSweep."""

    @pytest.mark.asyncio
    async def test_not_in_game(self, sweep, sink):
        assert await sweep.run(make_summoner("p1")) is None
        assert sink.emitted == []

    @pytest.mark.asyncio
    async def test_announces_new_ranked_game_once(
        self, sweep, gateway, repository, sink
    ):
        """Test a ranked live game is announced once per destination."""
        tracked = make_summoner("p1", solo="GOLD IV 20 LP")
        await repository.upsert_summoner(tracked)
        await repository.add_notification_destination("p1", "chan-a")
        await repository.add_notification_destination("p1", "chan-b")
        blue = [tracked, make_summoner("b2", solo="GOLD II 00 LP")]
        red = [make_summoner("r1", solo="SILVER I 00 LP"), make_summoner("r2")]
        gateway.fetch_live_match.return_value = live_match(blue, red)

        announced = await sweep.run(tracked)
        again = await sweep.run(tracked)

        assert announced.match_id == "4242"
        assert again is None
        assert await repository.is_live_match_recorded("4242")
        assert [destination for destination, _ in sink.emitted] == ["chan-a", "chan-b"]
        event = sink.emitted[0][1]
        assert event.summoner_name == "P1#EUW"
        assert event.queue is RankedQueue.SOLO
        assert event.current_rank == "GOLD IV 20 LP"
        # (1320 + 1500) // 2 = 1410
        assert event.team_average_rank == "GOLD III 10 LP"
        # the unranked enemy is left out of the average
        assert event.enemy_average_rank == "SILVER I 00 LP"
        assert event.insufficient_rank_data is False
        assert event.champion_id == 100
        assert event.game_id == "4242"

    @pytest.mark.asyncio
    async def test_flags_insufficient_rank_data(
        self, sweep, gateway, repository, sink
    ):
        tracked = make_summoner("p1")
        await repository.upsert_summoner(tracked)
        await repository.add_notification_destination("p1", "chan-a")
        gateway.fetch_live_match.return_value = live_match(
            [tracked], [make_summoner("r1", solo="GOLD IV 00 LP")]
        )

        await sweep.run(tracked)

        [(_, event)] = sink.emitted
        assert event.team_average_rank == "UNRANKED"
        assert event.insufficient_rank_data is True

    @pytest.mark.asyncio
    async def test_unranked_queue_is_ignored(self, sweep, gateway, repository, sink):
        tracked = make_summoner("p1")
        await repository.upsert_summoner(tracked)
        await repository.add_notification_destination("p1", "chan-a")
        gateway.fetch_live_match.return_value = live_match(
            [tracked], [make_summoner("r1")], queue=RankedQueue.UNRANKED
        )

        assert await sweep.run(tracked) is None
        assert sink.emitted == []
        assert not await repository.is_live_match_recorded("4242")

    @pytest.mark.asyncio
    async def test_announcement_failure_is_isolated(
        self, gateway, repository
    ):
        """Test a failing destination for one participant does not block the rest."""

        class FlakySink:
            def __init__(self):
                self.emitted = []

            async def emit(self, destination, event):
                if destination == "broken":
                    raise ConnectionError("chat service down")
                self.emitted.append((destination, event))

        flaky = FlakySink()
        sweep = LiveMatchSweep(gateway, repository, flaky)
        first, second = make_summoner("p1"), make_summoner("p2")
        for summoner, channel in ((first, "broken"), (second, "chan-b")):
            await repository.upsert_summoner(summoner)
            await repository.add_notification_destination(summoner.puuid, channel)
        gateway.fetch_live_match.return_value = live_match([first], [second])

        await sweep.run(first)

        assert [destination for destination, _ in flaky.emitted] == ["chan-b"]
