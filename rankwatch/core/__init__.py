"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import Base, DatabaseManager
from .enums import Tier, LeagueQueueType, RankedQueue, MatchStatus
from .logging import setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Database
    "Base",
    "DatabaseManager",
    # Enums
    "Tier",
    "LeagueQueueType",
    "RankedQueue",
    "MatchStatus",
    # Logging
    "setup_logging",
]
