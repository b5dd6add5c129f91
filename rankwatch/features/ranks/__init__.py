"""Ranks feature - rank value type and display codec."""

from .codec import (
    Rank,
    RankParts,
    TIER_DIVISIONS,
    MAX_TIER_INDEX,
    encode,
    decode,
    to_display_string,
    from_display_string,
    format_delta,
    tier_index_of,
)

__all__ = [
    "Rank",
    "RankParts",
    "TIER_DIVISIONS",
    "MAX_TIER_INDEX",
    "encode",
    "decode",
    "to_display_string",
    "from_display_string",
    "format_delta",
    "tier_index_of",
]
