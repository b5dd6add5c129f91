"""Repository pattern implementation for the tracking feature.

Provides collection-like access to tracked summoners, their notification
destinations and the match bookkeeping used for deduplication.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rankwatch.core.enums import MatchStatus

from .models import Match, Summoner
from .orm_models import MatchORM, NotificationDestinationORM, SummonerORM
from .transformers import summoner_orm_to_domain, summoner_to_orm, teams_to_payload

logger = structlog.get_logger(__name__)


class TrackingRepositoryInterface(ABC):
    """Interface for tracking repository.

    Defines contract for data access operations.
    Enables mocking and potential swap of implementations.
    """

    @abstractmethod
    async def get_summoner(self, puuid: str) -> Optional[Summoner]:
        """Get summoner by PUUID.

        :param puuid: Player's unique identifier
        :returns: Summoner if stored, None otherwise
        """
        pass

    @abstractmethod
    async def find_summoner_by_riot_id(
        self, name: str, tag_line: str, platform: str
    ) -> Optional[Summoner]:
        """Find summoner by Riot ID (case-insensitive exact match).

        :param name: Riot ID game name
        :param tag_line: Riot ID tag line
        :param platform: Platform routing value
        :returns: Summoner if found, None otherwise
        """
        pass

    @abstractmethod
    async def upsert_summoner(self, summoner: Summoner) -> Summoner:
        """Insert or update a summoner by PUUID.

        :param summoner: Summoner state to store
        :returns: Stored summoner
        """
        pass

    @abstractmethod
    async def mark_reconciled(self, puuid: str, at: datetime) -> None:
        """Set the summoner's last-reconciled timestamp.

        :param puuid: Player's unique identifier
        :param at: Checkpoint time
        """
        pass

    @abstractmethod
    async def oldest_summoner_with_destination(self) -> Optional[Summoner]:
        """Least recently reconciled summoner that has a destination.

        Never-reconciled summoners come first; PUUID breaks ties.

        :returns: Summoner or None when nobody is tracked
        """
        pass

    @abstractmethod
    async def list_notification_destinations(self, puuid: str) -> List[str]:
        """Channel ids subscribed to a summoner.

        :param puuid: Player's unique identifier
        :returns: Channel ids in subscription order
        """
        pass

    @abstractmethod
    async def add_notification_destination(self, puuid: str, channel_id: str) -> bool:
        """Subscribe a channel to a summoner.

        :returns: False when the mapping already existed
        """
        pass

    @abstractmethod
    async def remove_notification_destination(
        self, puuid: str, channel_id: str
    ) -> bool:
        """Unsubscribe a channel from a summoner.

        :returns: False when there was nothing to remove
        """
        pass

    @abstractmethod
    async def is_match_processed(self, match_id: str) -> bool:
        """Whether a finished match has already been processed."""
        pass

    @abstractmethod
    async def is_live_match_recorded(self, game_id: str) -> bool:
        """Whether a live match has already been announced."""
        pass

    @abstractmethod
    async def record_live_match(self, match: Match) -> None:
        """Store a newly announced live match as ongoing."""
        pass

    @abstractmethod
    async def finalize_match(self, ongoing_id: Optional[str], match: Match) -> None:
        """Mark a match finished.

        Renames the ongoing row ``ongoing_id`` to the finished match id when it
        exists, otherwise inserts a finished row.
        """
        pass


class SQLAlchemyTrackingRepository(TrackingRepositoryInterface):
    """SQLAlchemy implementation of tracking repository.

    Each operation runs in its own short transaction so a long-running loop
    never holds a session open between API calls.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize repository with a session factory.

        :param session_factory: Async session factory (see DatabaseManager)
        """
        self.session_factory = session_factory

    async def get_summoner(self, puuid: str) -> Optional[Summoner]:
        async with self.session_factory() as session:
            row = await session.get(SummonerORM, puuid)
            return summoner_orm_to_domain(row) if row else None

    async def find_summoner_by_riot_id(
        self, name: str, tag_line: str, platform: str
    ) -> Optional[Summoner]:
        stmt = select(SummonerORM).where(
            func.lower(SummonerORM.name) == name.lower(),
            func.lower(SummonerORM.tag_line) == tag_line.lower(),
            SummonerORM.platform == platform.lower(),
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalars().first()
            return summoner_orm_to_domain(row) if row else None

    async def upsert_summoner(self, summoner: Summoner) -> Summoner:
        async with self.session_factory() as session:
            async with session.begin():
                existing = await session.get(SummonerORM, summoner.puuid)
                row = summoner_to_orm(summoner)
                # The checkpoint is owned by mark_reconciled
                if existing is not None and summoner.last_reconciled_at is None:
                    row.last_reconciled_at = existing.last_reconciled_at
                merged = await session.merge(row)
            stored = summoner_orm_to_domain(merged)

        logger.debug(
            "summoner_upserted",
            puuid=summoner.puuid,
            solo_rank=summoner.solo_rank.value,
            flex_rank=summoner.flex_rank.value,
        )
        return stored

    async def mark_reconciled(self, puuid: str, at: datetime) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                row = await session.get(SummonerORM, puuid)
                if row is None:
                    logger.warning("mark_reconciled_unknown_summoner", puuid=puuid)
                    return
                row.last_reconciled_at = at

    async def oldest_summoner_with_destination(self) -> Optional[Summoner]:
        has_destination = (
            select(NotificationDestinationORM.id)
            .where(NotificationDestinationORM.puuid == SummonerORM.puuid)
            .exists()
        )
        stmt = (
            select(SummonerORM)
            .where(has_destination)
            .order_by(
                SummonerORM.last_reconciled_at.asc().nulls_first(),
                SummonerORM.puuid.asc(),
            )
            .limit(1)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalars().first()
            return summoner_orm_to_domain(row) if row else None

    async def list_notification_destinations(self, puuid: str) -> List[str]:
        stmt = (
            select(NotificationDestinationORM.channel_id)
            .where(NotificationDestinationORM.puuid == puuid)
            .order_by(NotificationDestinationORM.id)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def add_notification_destination(self, puuid: str, channel_id: str) -> bool:
        async with self.session_factory() as session:
            async with session.begin():
                stmt = select(NotificationDestinationORM.id).where(
                    NotificationDestinationORM.puuid == puuid,
                    NotificationDestinationORM.channel_id == channel_id,
                )
                if (await session.execute(stmt)).first() is not None:
                    return False
                session.add(
                    NotificationDestinationORM(puuid=puuid, channel_id=channel_id)
                )

        logger.info("destination_added", puuid=puuid, channel_id=channel_id)
        return True

    async def remove_notification_destination(
        self, puuid: str, channel_id: str
    ) -> bool:
        stmt = delete(NotificationDestinationORM).where(
            NotificationDestinationORM.puuid == puuid,
            NotificationDestinationORM.channel_id == channel_id,
        )
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(stmt)
                removed = result.rowcount > 0

        logger.info(
            "destination_removed", puuid=puuid, channel_id=channel_id, removed=removed
        )
        return removed

    async def is_match_processed(self, match_id: str) -> bool:
        stmt = select(MatchORM.match_id).where(
            MatchORM.match_id == match_id,
            MatchORM.status == MatchStatus.FINISHED.value,
        )
        async with self.session_factory() as session:
            return (await session.execute(stmt)).first() is not None

    async def is_live_match_recorded(self, game_id: str) -> bool:
        async with self.session_factory() as session:
            return await session.get(MatchORM, game_id) is not None

    async def record_live_match(self, match: Match) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    MatchORM(
                        match_id=match.match_id,
                        queue=match.queue.value,
                        status=MatchStatus.ONGOING.value,
                        platform=match.platform.value,
                        teams=teams_to_payload(match.teams),
                    )
                )
        logger.debug("live_match_recorded", game_id=match.match_id)

    async def finalize_match(self, ongoing_id: Optional[str], match: Match) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                row = await session.get(MatchORM, match.match_id)
                if row is None and ongoing_id:
                    ongoing = await session.get(MatchORM, ongoing_id)
                    if ongoing is not None:
                        await session.delete(ongoing)
                        await session.flush()
                if row is None:
                    row = MatchORM(match_id=match.match_id)
                    session.add(row)
                row.queue = match.queue.value
                row.status = MatchStatus.FINISHED.value
                row.platform = match.platform.value
                row.teams = teams_to_payload(match.teams)

        logger.debug("match_finalized", match_id=match.match_id, ongoing_id=ongoing_id)
