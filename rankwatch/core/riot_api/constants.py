"""Riot API constants and enum definitions."""

from enum import Enum
from typing import Union


class Region(str, Enum):
    """Riot API regions for regional routing."""

    AMERICAS = "americas"
    ASIA = "asia"
    EUROPE = "europe"
    SEA = "sea"


class Platform(str, Enum):
    """Riot API platforms for platform routing."""

    BR1 = "br1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    JP1 = "jp1"
    KR = "kr"
    LA1 = "la1"
    LA2 = "la2"
    NA1 = "na1"
    OC1 = "oc1"
    PH2 = "ph2"
    RU = "ru"
    SG2 = "sg2"
    TH2 = "th2"
    TR1 = "tr1"
    TW2 = "tw2"
    VN2 = "vn2"


PLATFORM_TO_REGION = {
    Platform.BR1: Region.AMERICAS,
    Platform.LA1: Region.AMERICAS,
    Platform.LA2: Region.AMERICAS,
    Platform.NA1: Region.AMERICAS,
    Platform.EUN1: Region.EUROPE,
    Platform.EUW1: Region.EUROPE,
    Platform.RU: Region.EUROPE,
    Platform.TR1: Region.EUROPE,
    Platform.JP1: Region.ASIA,
    Platform.KR: Region.ASIA,
    Platform.OC1: Region.SEA,
    Platform.PH2: Region.SEA,
    Platform.SG2: Region.SEA,
    Platform.TH2: Region.SEA,
    Platform.TW2: Region.SEA,
    Platform.VN2: Region.SEA,
}


def region_for_platform(platform: Union[Platform, str]) -> Region:
    """Map a platform routing value to its regional routing value."""
    if not isinstance(platform, Platform):
        platform = Platform(platform.lower())
    return PLATFORM_TO_REGION[platform]


def platform_from_match_id(match_id: str) -> Platform:
    """Extract the platform from a match-v5 id such as ``EUW1_7012345678``."""
    prefix, _, _ = match_id.partition("_")
    return Platform(prefix.lower())
