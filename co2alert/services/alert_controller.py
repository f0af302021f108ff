"""
Alert Controller - one evaluation cycle of the CO2 alert state machine

States mirror the alert key: absent = Inactive, present = Active.

    Inactive + co2 >= threshold -> notify; Active only if delivered
    Inactive + co2 <  threshold -> nothing
    Active   + co2 >= threshold -> nothing (already notified)
    Active   + co2 <  threshold -> clear, no "all clear" message

Read-decide-write is not atomic. Two overlapping cycles can both see
Inactive and both notify.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from co2alert.core.exceptions import StateStoreError
from co2alert.services.alert_state import AlertStateStore
from co2alert.services.notifier import Notifier, build_alert_message
from co2alert.services.switchbot import SensorReading, SwitchBotClient

logger = logging.getLogger(__name__)


class CycleOutcome(str, Enum):
    FETCH_FAILED = "fetch_failed"
    STORE_FAILED = "store_failed"
    NORMAL = "normal"
    ALERT_SENT = "alert_sent"
    DELIVERY_FAILED = "delivery_failed"
    SUPPRESSED = "suppressed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class CycleResult:
    outcome: CycleOutcome
    reading: SensorReading | None = None


class AlertController:
    """Runs sensor read -> decision -> notify/persist."""

    def __init__(
        self,
        sensor: SwitchBotClient,
        state: AlertStateStore,
        notifier: Notifier,
        threshold: int = 3000,
    ):
        self.sensor = sensor
        self.state = state
        self.notifier = notifier
        self.threshold = threshold

    async def run_cycle(self, schedule: str = "manual") -> CycleResult:
        """Evaluate one reading. Never mutates state on an incomplete read."""
        fetch = await self.sensor.fetch_reading()
        if not fetch.ok:
            logger.error(f"[{schedule}] Failed to read CO2 sensor: {fetch.error}")
            return CycleResult(CycleOutcome.FETCH_FAILED)

        reading = fetch.reading
        logger.info(
            f"[{schedule}] CO2: {reading.co2} ppm, "
            f"Temp: {reading.temperature}°C, Humidity: {reading.humidity}%"
        )

        try:
            outcome = await self._apply(schedule, reading)
        except StateStoreError as e:
            logger.error(f"[{schedule}] Alert state store failed: {e}")
            outcome = CycleOutcome.STORE_FAILED

        return CycleResult(outcome, reading)

    async def _apply(self, schedule: str, reading: SensorReading) -> CycleOutcome:
        alert_active = await self.state.is_active()
        above = reading.co2 >= self.threshold

        if above and alert_active:
            logger.info(f"[{schedule}] Alert already active. Skipping notification.")
            return CycleOutcome.SUPPRESSED

        if above:
            logger.info(f"[{schedule}] 🚨 CO2 threshold exceeded. Sending notification...")
            delivered = await self.notifier.send(build_alert_message(reading, self.threshold))
            if not delivered:
                logger.error(f"[{schedule}] ❌ Failed to send notification. Will retry next cycle.")
                return CycleOutcome.DELIVERY_FAILED

            await self.state.mark_active(reading.co2)
            logger.info(f"[{schedule}] ✅ Notification sent successfully.")
            return CycleOutcome.ALERT_SENT

        if alert_active:
            await self.state.clear()
            logger.info(f"[{schedule}] CO2 level back to normal. Alert state cleared.")
            return CycleOutcome.CLEARED

        return CycleOutcome.NORMAL
