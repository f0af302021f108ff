"""
CO2 Alert - Worker
Polls the SwitchBot CO2 meter on a schedule and pushes alerts
"""

import asyncio
import logging
import signal

from co2alert.core.config import settings
from co2alert.core.database import async_session_maker, engine
from co2alert.core.exceptions import ConfigError
from co2alert.services.runtime import open_controller
from co2alert.services.scheduler import CycleScheduler


logger = logging.getLogger(__name__)


async def main():
    """Entry point."""
    logging.basicConfig(level=settings.log_level.upper())

    missing = settings.missing_credentials()
    if missing:
        logger.error(f"❌ Missing required settings: {', '.join(missing)}")
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    logger.info(
        f"🚀 Starting CO2 Alert worker (threshold {settings.co2_threshold} ppm, "
        f"channel {settings.channel})"
    )

    async with open_controller(settings, async_session_maker) as controller:
        scheduler = CycleScheduler(
            controller,
            interval_seconds=settings.poll_interval_seconds,
            cron=settings.schedule_cron,
            timeout_seconds=settings.cycle_timeout_seconds,
        )
        scheduler_task = asyncio.create_task(scheduler.start())

        # Handle shutdown signals
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, scheduler_task.cancel)

        try:
            await scheduler_task
        except asyncio.CancelledError:
            logger.info("⏹️ Shutting down...")
        finally:
            scheduler.stop()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
