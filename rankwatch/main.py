"""Process entry point: run the reconciliation loop until SIGINT/SIGTERM."""

import asyncio
import signal

import structlog

from rankwatch.core import DatabaseManager, get_global_settings, setup_logging
from rankwatch.core.riot_api import RiotAPIClient
from rankwatch.features.tracking import (
    LiveMatchSweep,
    LoggingNotificationSink,
    ReconciliationScheduler,
    RiotAPIGateway,
    SQLAlchemyTrackingRepository,
)

logger = structlog.get_logger(__name__)


def _validate_api_key_configuration(api_key: str) -> None:
    """Log Riot API key configuration status."""
    if not api_key or api_key == "dev_api_key":
        logger.warning(
            "RIOT_API_KEY not configured! Set it in the environment or .env file.",
            hint="Get your key from https://developer.riotgames.com",
        )
    elif api_key.startswith("RGAPI-"):
        logger.info("Riot API key configured (development key detected)")
        logger.warning("Development API keys expire every 24 hours!")
    else:
        logger.info("Riot API key configured")


def _install_signal_handlers(stop_signal: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_signal.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_signal.set))


async def run() -> None:
    """Wire dependencies and run the loop."""
    settings = get_global_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    _validate_api_key_configuration(settings.riot_api_key)

    db = DatabaseManager()
    await db.create_all()

    stop_signal = asyncio.Event()
    _install_signal_handlers(stop_signal)

    try:
        async with RiotAPIClient() as client:
            repository = SQLAlchemyTrackingRepository(db.async_session_factory)
            gateway = RiotAPIGateway(client, repository)
            sink = LoggingNotificationSink()
            live_sweep = (
                LiveMatchSweep(gateway, repository, sink)
                if settings.live_match_sweep_enabled
                else None
            )
            scheduler = ReconciliationScheduler(
                gateway, repository, sink, live_sweep=live_sweep, settings=settings
            )
            await scheduler.run(stop_signal)
    finally:
        await db.close()
        logger.info("Shutdown complete")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
