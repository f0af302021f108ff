"""
Tests for the cycle scheduler.
"""

import asyncio

import pytest

from co2alert.services.alert_controller import AlertController, CycleOutcome, CycleResult
from co2alert.services.alert_state import AlertStateStore
from co2alert.services.scheduler import CycleScheduler
from co2alert.services.switchbot import SensorFetch, SensorReading

from conftest import FakeKeyValueStore, FakeNotifier, FakeSensor


class SlowNotifier(FakeNotifier):
    """Notifier that stalls before reporting delivery."""

    def __init__(self, delay: float):
        super().__init__(delivered=True)
        self.delay = delay

    async def send(self, text):
        await asyncio.sleep(self.delay)
        return await super().send(text)


class StubController:
    def __init__(self, delay: float = 0, error: Exception | None = None):
        self.delay = delay
        self.error = error
        self.schedules: list[str] = []
        self.completed = 0

    async def run_cycle(self, schedule="manual"):
        self.schedules.append(schedule)
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        self.completed += 1
        return CycleResult(CycleOutcome.NORMAL)


class TestRunOnce:
    """Tests for a single scheduled trigger."""

    @pytest.mark.asyncio
    async def test_passes_cron_descriptor(self):
        controller = StubController()
        scheduler = CycleScheduler(controller, cron="*/2 * * * *")

        result = await scheduler.run_once("*/2 * * * *")

        assert result.outcome == CycleOutcome.NORMAL
        assert controller.schedules == ["*/2 * * * *"]

    @pytest.mark.asyncio
    async def test_overrunning_cycle_is_abandoned(self):
        controller = StubController(delay=5)
        scheduler = CycleScheduler(controller, timeout_seconds=0.05)

        result = await scheduler.run_once("* * * * *")

        assert result is None
        assert controller.completed == 0

    @pytest.mark.asyncio
    async def test_cancelled_cycle_leaves_state_untouched(self):
        kv = FakeKeyValueStore()
        controller = AlertController(
            FakeSensor(SensorFetch(reading=SensorReading(co2=3500, temperature=25, humidity=50))),
            AlertStateStore(kv, key="co2_alert_active"),
            SlowNotifier(delay=5),
            threshold=3000,
        )
        scheduler = CycleScheduler(controller, timeout_seconds=0.05)

        result = await scheduler.run_once("* * * * *")

        assert result is None
        assert kv.mutations == 0
        assert "co2_alert_active" not in kv.data

    @pytest.mark.asyncio
    async def test_unexpected_error_is_logged_not_raised(self, caplog):
        controller = StubController(error=RuntimeError("boom"))
        scheduler = CycleScheduler(controller)

        result = await scheduler.run_once("* * * * *")

        assert result is None
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_zero_timeout_disables_budget(self):
        scheduler = CycleScheduler(StubController(), timeout_seconds=0)

        assert scheduler.timeout_seconds is None


class TestLoop:
    """Tests for the periodic loop."""

    @pytest.mark.asyncio
    async def test_runs_until_stopped(self):
        controller = StubController()
        scheduler = CycleScheduler(controller, interval_seconds=0.01)

        task = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0.05)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1)

        assert controller.completed >= 2
