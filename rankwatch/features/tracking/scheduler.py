"""Reconciliation scheduler - the rank polling loop.

Each cycle:
1. Selects the least recently reconciled summoner that has a destination
2. Optionally sweeps that summoner's live game (announced once)
3. Refreshes solo and flex ranks and diffs them against stored state
4. On change, attributes it to the latest ranked match (when that match is
   already processed the new ranks are not stored, so the change is seen
   again once the match list catches up) and fans out rank-change events to
   every tracked participant
5. Persists new ranks and always checkpoints the selected summoner, so it
   moves to the back of the queue whether the cycle succeeded or not
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

import structlog
from structlog import contextvars as structlog_contextvars

from rankwatch.core.config import Settings, get_global_settings
from rankwatch.core.enums import RankedQueue

from .error_handling import handle_riot_api_errors
from .models import Match, Participant, Summoner
from .notifications import (
    NotificationSink,
    ParticipantRenderer,
    RankChangeEvent,
    render_visual,
)

if TYPE_CHECKING:
    from .gateway import RiotAPIGateway
    from .live_matches import LiveMatchSweep
    from .repository import TrackingRepositoryInterface

logger = structlog.get_logger(__name__)

RANKED_QUEUES = (RankedQueue.SOLO, RankedQueue.FLEX)
CHECKPOINT_STEP = timedelta(microseconds=1)


class CycleOutcome(str, Enum):
    """How a reconciliation cycle ended."""

    IDLE = "idle"
    UNCHANGED = "unchanged"
    NOTIFIED = "notified"
    ALREADY_PROCESSED = "already_processed"
    UNRANKED_MATCH = "unranked_match"
    FAILED = "failed"


@dataclass
class CycleResult:
    outcome: CycleOutcome
    puuid: Optional[str] = None
    match_id: Optional[str] = None
    events_emitted: int = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def live_game_id(match_id: str) -> str:
    """Spectator game id of a match-v5 id (``EUW1_123`` -> ``123``)."""
    _, _, game_id = match_id.partition("_")
    return game_id or match_id


def changed_queues(old: Summoner, new: Summoner) -> List[RankedQueue]:
    return [q for q in RANKED_QUEUES if new.rank_for(q) != old.rank_for(q)]


class ReconciliationScheduler:
    """Cooperative polling loop; one summoner per cycle, oldest first."""

    def __init__(
        self,
        gateway: "RiotAPIGateway",
        repository: "TrackingRepositoryInterface",
        sink: NotificationSink,
        renderer: Optional[ParticipantRenderer] = None,
        live_sweep: Optional["LiveMatchSweep"] = None,
        clock: Callable[[], datetime] = utc_now,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            gateway: Riot API anti-corruption layer
            repository: Tracking persistence
            sink: Notification delivery
            renderer: Optional participant visual renderer
            live_sweep: Optional live-match sweep run before rank checks
            clock: Source of checkpoint timestamps (timezone-aware)
            settings: Loop timing (uses global settings if None)
        """
        self.gateway = gateway
        self.repository = repository
        self.sink = sink
        self.renderer = renderer
        self.live_sweep = live_sweep
        self.clock = clock
        self.settings = settings or get_global_settings()
        self._last_checkpoint: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(
        self, stop_signal: asyncio.Event, max_cycles: Optional[int] = None
    ) -> int:
        """
        Run cycles until ``stop_signal`` is set.

        Args:
            stop_signal: Set to stop the loop after the current cycle
            max_cycles: Stop after this many cycles (None runs forever)

        Returns:
            Number of cycles executed
        """
        cycles = 0
        logger.info("Reconciliation loop started")

        while not stop_signal.is_set():
            if max_cycles is not None and cycles >= max_cycles:
                break

            try:
                result: Optional[CycleResult] = await self.run_cycle()
            except Exception as e:
                logger.error(
                    "Reconciliation cycle crashed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result = None
            cycles += 1

            if result is None or result.outcome is CycleOutcome.IDLE:
                delay = self.settings.scheduler_idle_seconds
            else:
                delay = self.settings.scheduler_cycle_pause_seconds
            await self._pause(stop_signal, delay)

        logger.info("Reconciliation loop stopped", cycles=cycles)
        return cycles

    @staticmethod
    async def _pause(stop_signal: asyncio.Event, delay: float) -> None:
        """Sleep up to ``delay`` seconds, waking early when stopped."""
        if delay <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(stop_signal.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def run_cycle(self) -> CycleResult:
        """Run one reconciliation cycle."""
        summoner = await self.repository.oldest_summoner_with_destination()
        if summoner is None:
            logger.debug("No tracked summoner with a destination, idling")
            return CycleResult(CycleOutcome.IDLE)

        structlog_contextvars.bind_contextvars(puuid=summoner.puuid)
        try:
            return await self._reconcile(summoner)
        except Exception as e:
            logger.error(
                "Reconciliation cycle failed",
                summoner=summoner.display_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CycleResult(CycleOutcome.FAILED, puuid=summoner.puuid)
        finally:
            await self._checkpoint(summoner)
            structlog_contextvars.unbind_contextvars("puuid")

    async def _checkpoint(self, summoner: Summoner) -> None:
        """Advance the freshness timestamp strictly past every earlier one."""
        stamp = self.clock()
        for previous in (self._last_checkpoint, summoner.last_reconciled_at):
            if previous is not None and stamp <= previous:
                stamp = previous + CHECKPOINT_STEP

        await self.repository.mark_reconciled(summoner.puuid, stamp)
        self._last_checkpoint = stamp

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def _reconcile(self, summoner: Summoner) -> CycleResult:
        if self.live_sweep is not None:
            await self._sweep_live_match(summoner)

        refreshed = await self._refresh_ranks(summoner)
        changed = changed_queues(summoner, refreshed)
        if not changed:
            logger.debug("Ranks unchanged", summoner=summoner.display_name)
            if refreshed.summoner_id != summoner.summoner_id:
                await self.repository.upsert_summoner(refreshed)
            return CycleResult(CycleOutcome.UNCHANGED, puuid=summoner.puuid)

        logger.info(
            "Rank change detected",
            summoner=summoner.display_name,
            queues=[q.value for q in changed],
            solo_rank=str(refreshed.solo_rank),
            flex_rank=str(refreshed.flex_rank),
        )

        match_id = await self.gateway.fetch_latest_ranked_match_id(
            summoner.puuid, summoner.platform
        )
        if match_id is None:
            events = await self._notify_rank_changes(summoner, refreshed)
            await self.repository.upsert_summoner(refreshed)
            return CycleResult(
                CycleOutcome.NOTIFIED, puuid=summoner.puuid, events_emitted=events
            )

        if await self.repository.is_match_processed(match_id):
            logger.info("Match already processed, skipping", match_id=match_id)
            # Ranks stay unpersisted so the change is re-detected once the
            # match list catches up with league-v4
            if refreshed.summoner_id != summoner.summoner_id:
                learned = summoner.with_ranks(summoner.solo_rank, summoner.flex_rank)
                learned.summoner_id = refreshed.summoner_id
                await self.repository.upsert_summoner(learned)
            return CycleResult(
                CycleOutcome.ALREADY_PROCESSED, puuid=summoner.puuid, match_id=match_id
            )

        match = await self.gateway.fetch_match(match_id)
        if not match.queue.is_ranked:
            logger.info("Latest match is not ranked, skipping", match_id=match_id)
            await self.repository.upsert_summoner(refreshed)
            return CycleResult(
                CycleOutcome.UNRANKED_MATCH, puuid=summoner.puuid, match_id=match_id
            )

        events = 0
        if match.participant_for(summoner.puuid) is None:
            events += await self._notify_rank_changes(summoner, refreshed, match=match)
            await self.repository.upsert_summoner(refreshed)

        for participant in match.participants:
            emitted = await self._process_participant(
                participant, match, summoner, refreshed
            )
            events += emitted or 0

        await self.repository.finalize_match(live_game_id(match.match_id), match)
        return CycleResult(
            CycleOutcome.NOTIFIED,
            puuid=summoner.puuid,
            match_id=match.match_id,
            events_emitted=events,
        )

    @handle_riot_api_errors(
        operation="sweep live match",
        critical=False,
        log_context=lambda self, summoner: {"puuid": summoner.puuid},
    )
    async def _sweep_live_match(self, summoner: Summoner) -> Optional[Match]:
        return await self.live_sweep.run(summoner)

    async def _refresh_ranks(self, summoner: Summoner) -> Summoner:
        """Current state of a summoner with freshly fetched ranks."""
        if not summoner.summoner_id:
            fetched = await self.gateway.fetch_summoner(
                summoner.puuid, summoner.platform
            )
            refreshed = summoner.with_ranks(fetched.solo_rank, fetched.flex_rank)
            refreshed.summoner_id = fetched.summoner_id
            return refreshed

        solo, flex = await self.gateway.fetch_rank(
            summoner.summoner_id, summoner.platform
        )
        return summoner.with_ranks(solo, flex)

    @handle_riot_api_errors(
        operation="process match participant",
        critical=False,
        log_context=lambda self, participant, match, stored, polled: {
            "participant_puuid": participant.summoner.puuid,
            "match_id": match.match_id,
        },
    )
    async def _process_participant(
        self,
        participant: Participant,
        match: Match,
        stored: Summoner,
        polled: Summoner,
    ) -> int:
        """Notify and persist one participant; failures stay with this participant.

        ``stored`` and ``polled`` are the selected summoner before and after the
        rank refresh; the match payload only supplies its current identity.
        """
        old = participant.summoner
        if old.puuid == polled.puuid:
            new = old.with_ranks(polled.solo_rank, polled.flex_rank)
            old = stored
            new.summoner_id = polled.summoner_id
        else:
            destinations = await self.repository.list_notification_destinations(
                old.puuid
            )
            if not destinations:
                return 0
            new = await self._refresh_ranks(old)

        events = await self._notify_rank_changes(old, new, participant, match)
        await self.repository.upsert_summoner(new)
        return events

    async def _notify_rank_changes(
        self,
        old: Summoner,
        new: Summoner,
        participant: Optional[Participant] = None,
        match: Optional[Match] = None,
    ) -> int:
        """Emit one event per destination per changed queue."""
        changed = changed_queues(old, new)
        if not changed:
            return 0

        destinations = await self.repository.list_notification_destinations(new.puuid)
        if not destinations:
            return 0

        visual = await render_visual(self.renderer, participant)
        emitted = 0
        for queue in changed:
            event = RankChangeEvent.build(
                new,
                queue,
                old.rank_for(queue),
                new.rank_for(queue),
                participant=participant,
                match=match,
                visual=visual,
            )
            for destination in destinations:
                await self.sink.emit(destination, event)
                emitted += 1

        logger.info(
            "Rank change notified",
            summoner=new.display_name,
            match_id=match.match_id if match else None,
            events=emitted,
        )
        return emitted
