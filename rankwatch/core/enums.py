"""Shared enums used across features.

This module provides a single source of truth for enums used in domain models,
persistence and notification payloads.
"""

from enum import Enum
from typing import Optional

# match-v5 / spectator-v5 queue ids
RANKED_SOLO_QUEUE_ID = 420
RANKED_FLEX_QUEUE_ID = 440


class Tier(str, Enum):
    """League of Legends rank tiers, lowest first."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"


class LeagueQueueType(str, Enum):
    """Queue tags used by league-v4 ladder entries."""

    RANKED_SOLO_5X5 = "RANKED_SOLO_5x5"
    RANKED_FLEX_SR = "RANKED_FLEX_SR"


class RankedQueue(str, Enum):
    """Closed classification of a game's queue, derived once at parse time."""

    SOLO = "Solo/Duo"
    FLEX = "Flex"
    UNRANKED = "UNRANKED"

    @classmethod
    def from_queue_id(cls, queue_id: Optional[int]) -> "RankedQueue":
        """Classify a numeric Riot queue id."""
        if queue_id == RANKED_SOLO_QUEUE_ID:
            return cls.SOLO
        if queue_id == RANKED_FLEX_QUEUE_ID:
            return cls.FLEX
        return cls.UNRANKED

    @classmethod
    def from_league_queue(cls, queue_type: str) -> "RankedQueue":
        """Classify a league-v4 ``queueType`` tag."""
        if queue_type == LeagueQueueType.RANKED_SOLO_5X5.value:
            return cls.SOLO
        if queue_type == LeagueQueueType.RANKED_FLEX_SR.value:
            return cls.FLEX
        return cls.UNRANKED

    @property
    def is_ranked(self) -> bool:
        return self is not RankedQueue.UNRANKED


class MatchStatus(str, Enum):
    """Lifecycle of a stored match row."""

    ONGOING = "ONGOING"
    FINISHED = "FINISHED"
