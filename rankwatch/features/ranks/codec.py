"""Rank value type and codec.

A rank is packed into one ordered integer: ``tier_index * 100 + points``.
``tier_index`` walks the ladder from IRON IV (1) to CHALLENGER I (31) and
``0`` is reserved for "no rank yet", so integer order is ladder order and the
difference of two ranks is the league-point delta across divisions.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from rankwatch.core.enums import Tier

POINTS_PER_DIVISION = 100
MAX_POINTS = POINTS_PER_DIVISION - 1
UNRANKED_LABEL = "UNRANKED"

_DIVISIONS = ("IV", "III", "II", "I")
_APEX_TIERS = (Tier.MASTER, Tier.GRANDMASTER, Tier.CHALLENGER)

# Index 0 is the unranked placeholder.
TIER_DIVISIONS: Tuple[Optional[Tuple[Tier, str]], ...] = (
    (None,)
    + tuple(
        (tier, division)
        for tier in Tier
        if tier not in _APEX_TIERS
        for division in _DIVISIONS
    )
    + tuple((tier, "I") for tier in _APEX_TIERS)
)
MAX_TIER_INDEX = len(TIER_DIVISIONS) - 1

_INDEX_BY_TIER_DIVISION = {
    entry: index for index, entry in enumerate(TIER_DIVISIONS) if entry is not None
}


class RankParts(NamedTuple):
    """Decoded form of a rank. ``tier`` and ``division`` are None when unranked."""

    tier: Optional[Tier]
    division: Optional[str]
    points: int


UNRANKED_PARTS = RankParts(None, None, 0)


def tier_index_of(tier: Tier, division: str) -> int:
    """Ladder index of a tier-division pair, 0 when the pair does not exist."""
    return _INDEX_BY_TIER_DIVISION.get((tier, division), 0)


def encode(tier_index: int, points: int) -> int:
    """Pack a tier-division index and league points into one integer."""
    if not 0 < tier_index <= MAX_TIER_INDEX:
        raise ValueError(f"tier_index must be in 1..{MAX_TIER_INDEX}, got {tier_index}")
    if not 0 <= points <= MAX_POINTS:
        raise ValueError(f"points must be in 0..{MAX_POINTS}, got {points}")
    return tier_index * POINTS_PER_DIVISION + points


def decode(value: int) -> RankParts:
    """Unpack an encoded rank. Anything outside the table decodes to unranked."""
    tier_index, points = divmod(value, POINTS_PER_DIVISION)
    if value <= 0 or not 0 < tier_index <= MAX_TIER_INDEX:
        return UNRANKED_PARTS
    tier, division = TIER_DIVISIONS[tier_index]
    return RankParts(tier, division, points)


def to_display_string(value: int) -> str:
    """Render an encoded rank, e.g. ``GOLD IV 45 LP``."""
    parts = decode(value)
    if parts.tier is None:
        return UNRANKED_LABEL
    return f"{parts.tier.value} {parts.division} {parts.points:02d} LP"


def from_display_string(text: str) -> int:
    """Parse a display string back to an encoded rank.

    Parsing is best-effort: malformed or unknown input yields 0 (unranked).
    """
    if not isinstance(text, str):
        return 0

    tokens = text.strip().upper().split()
    if len(tokens) != 4 or tokens[3] != "LP":
        return 0

    tier_name, division, points_text, _ = tokens
    try:
        tier = Tier(tier_name)
        points = int(points_text)
    except ValueError:
        return 0

    tier_index = tier_index_of(tier, division)
    if tier_index == 0 or not 0 <= points <= MAX_POINTS:
        return 0
    return encode(tier_index, points)


def format_delta(delta: int) -> str:
    """Signed league-point delta, e.g. ``+25 LP`` or ``-13 LP``."""
    return f"{delta:+d} LP"


@dataclass(frozen=True, order=True)
class Rank:
    """Ordered rank value; ``Rank(0)`` is unranked."""

    value: int = 0

    @classmethod
    def unranked(cls) -> "Rank":
        return cls(0)

    @classmethod
    def of(cls, tier: Tier, division: str, points: int) -> "Rank":
        """Build a rank from its tier, division and league points."""
        tier_index = tier_index_of(tier, division)
        if tier_index == 0:
            raise ValueError(f"Unknown tier division: {tier.value} {division}")
        return cls(encode(tier_index, points))

    @classmethod
    def from_display_string(cls, text: str) -> "Rank":
        return cls(from_display_string(text))

    @classmethod
    def from_league_entry(cls, tier: str, division: str, league_points: int) -> "Rank":
        """Build a rank from league-v4 entry fields.

        Apex tiers report points above 99; those are clamped so the packed
        value never spills into the next tier index. Unknown tiers are unranked.
        """
        try:
            tier_enum = Tier(tier.upper())
        except ValueError:
            return cls.unranked()

        tier_index = tier_index_of(tier_enum, division.upper())
        if tier_index == 0:
            return cls.unranked()
        # Apex LP changes above 99 are invisible to change detection
        points = min(max(league_points, 0), MAX_POINTS)
        return cls(encode(tier_index, points))

    @property
    def is_ranked(self) -> bool:
        return decode(self.value).tier is not None

    @property
    def parts(self) -> RankParts:
        return decode(self.value)

    def delta(self, previous: "Rank") -> int:
        """League points gained since ``previous`` (negative on loss)."""
        return self.value - previous.value

    def to_display_string(self) -> str:
        return to_display_string(self.value)

    def __str__(self) -> str:
        return self.to_display_string()
