"""
Scheduler Service - triggers one alert evaluation cycle per interval
Each cycle is tagged with the cron descriptor it stands for
"""

import asyncio
import logging

from co2alert.services.alert_controller import AlertController, CycleResult

logger = logging.getLogger(__name__)


class CycleScheduler:
    """Periodic trigger for AlertController.run_cycle."""

    def __init__(
        self,
        controller: AlertController,
        interval_seconds: float = 60,
        cron: str = "* * * * *",
        timeout_seconds: float | None = None,
    ):
        self.controller = controller
        self.interval_seconds = interval_seconds
        self.cron = cron
        self.timeout_seconds = timeout_seconds or None
        self.running = False

    async def start(self):
        """Start the scheduler loop."""
        self.running = True
        logger.info(f"📅 CO2 alert scheduler started ({self.cron}, every {self.interval_seconds}s)")

        while self.running:
            await self.run_once(self.cron)
            await asyncio.sleep(self.interval_seconds)

    def stop(self):
        """Stop the scheduler."""
        self.running = False
        logger.info("📅 CO2 alert scheduler stopped")

    async def run_once(self, cron: str) -> CycleResult | None:
        """Run one cycle within the wall-clock budget.

        A cycle that overruns is cancelled mid-flight and counts as failed.
        Returns None when the cycle did not complete.
        """
        try:
            return await asyncio.wait_for(
                self.controller.run_cycle(cron),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"[{cron}] Cycle exceeded {self.timeout_seconds}s budget and was abandoned")
        except Exception as e:
            logger.exception(f"[{cron}] Failed to process CO2 data: {e}")
        return None
