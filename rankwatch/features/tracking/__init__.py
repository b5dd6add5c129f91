"""Tracking feature - summoner tracking, rank reconciliation and notifications."""

from .models import Summoner, Loadout, Participant, Team, Match
from .gateway import RiotAPIGateway
from .repository import TrackingRepositoryInterface, SQLAlchemyTrackingRepository
from .notifications import (
    RankChangeEvent,
    MatchStartedEvent,
    NotificationSink,
    ParticipantRenderer,
    LoggingNotificationSink,
)
from .error_handling import handle_riot_api_errors
from .live_matches import LiveMatchSweep
from .scheduler import ReconciliationScheduler, CycleOutcome, CycleResult
from .service import TrackingService, validate_riot_id

__all__ = [
    # Models
    "Summoner",
    "Loadout",
    "Participant",
    "Team",
    "Match",
    # Gateway
    "RiotAPIGateway",
    # Repository
    "TrackingRepositoryInterface",
    "SQLAlchemyTrackingRepository",
    # Notifications
    "RankChangeEvent",
    "MatchStartedEvent",
    "NotificationSink",
    "ParticipantRenderer",
    "LoggingNotificationSink",
    # Loop
    "handle_riot_api_errors",
    "LiveMatchSweep",
    "ReconciliationScheduler",
    "CycleOutcome",
    "CycleResult",
    # Service
    "TrackingService",
    "validate_riot_id",
]
