"""SQLAlchemy 2.0 ORM models for the tracking feature."""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    DateTime as SQLDateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from rankwatch.core.database import Base


class SummonerORM(Base):
    """Tracked summoner row; ranks are stored in their packed integer form."""

    __tablename__ = "summoners"
    __table_args__ = (
        Index("idx_summoners_riot_id", "name", "tag_line", "platform"),
        Index("idx_summoners_last_reconciled", "last_reconciled_at"),
    )

    # Riot PUUIDs are 78 characters
    puuid: Mapped[str] = mapped_column(
        String(78),
        primary_key=True,
        comment="Player's universally unique identifier from Riot API",
    )

    name: Mapped[str] = mapped_column(
        String(128), nullable=False, default="", comment="Riot ID game name"
    )

    tag_line: Mapped[str] = mapped_column(
        String(32), nullable=False, default="", comment="Riot ID tag line"
    )

    summoner_id: Mapped[Optional[str]] = mapped_column(
        String(78), nullable=True, comment="Encrypted summoner id (league-v4 key)"
    )

    profile_icon_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Profile icon id"
    )

    solo_rank: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Packed solo/duo rank (tier_index * 100 + points, 0 = unranked)",
    )

    flex_rank: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Packed flex rank (tier_index * 100 + points, 0 = unranked)",
    )

    platform: Mapped[str] = mapped_column(
        String(8), nullable=False, comment="Platform routing value (e.g., euw1)"
    )

    last_reconciled_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=True,
        comment="When the reconciliation loop last checked this summoner",
    )

    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="When this summoner was first tracked",
    )

    destinations: Mapped[List["NotificationDestinationORM"]] = relationship(
        back_populates="summoner",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<SummonerORM(puuid='{self.puuid}', name='{self.name}#{self.tag_line}')>"


class NotificationDestinationORM(Base):
    """Channel subscribed to a summoner's notifications."""

    __tablename__ = "notification_destinations"
    __table_args__ = (
        UniqueConstraint("puuid", "channel_id", name="uq_destination_puuid_channel"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, comment="Surrogate key"
    )

    puuid: Mapped[str] = mapped_column(
        String(78),
        ForeignKey("summoners.puuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Tracked summoner",
    )

    channel_id: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="Chat channel receiving events"
    )

    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    summoner: Mapped[SummonerORM] = relationship(back_populates="destinations")


class MatchORM(Base):
    """Announced live match or processed finished match."""

    __tablename__ = "matches"
    __table_args__ = (Index("idx_matches_status", "status"),)

    match_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Live game id while ongoing, match-v5 id once finished",
    )

    queue: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="Ranked queue (Solo/Duo, Flex)"
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="ONGOING or FINISHED"
    )

    platform: Mapped[str] = mapped_column(String(8), nullable=False)

    teams: Mapped[Any] = mapped_column(
        JSON, nullable=False, comment="Serialized teams and participants"
    )

    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<MatchORM(match_id='{self.match_id}', status='{self.status}')>"
