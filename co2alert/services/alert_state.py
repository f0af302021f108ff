"""
Alert state - presence of one key means "alert active"
"""

from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel, ValidationError

from co2alert.services.kv_store import KeyValueStore


class AlertState(BaseModel):
    """Informational payload stored with an active alert."""

    co2_value: float
    triggered_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertStateStore:
    """Inactive/Active alert flag persisted under a single key."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = "co2_alert_active",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.kv = kv
        self.key = key
        self.clock = clock

    async def is_active(self) -> bool:
        return await self.kv.get(self.key) is not None

    async def mark_active(self, co2_value: float) -> None:
        state = AlertState(co2_value=co2_value, triggered_at=self.clock())
        await self.kv.put(self.key, state.model_dump_json())

    async def clear(self) -> None:
        await self.kv.delete(self.key)

    async def current(self) -> AlertState | None:
        """Return the stored payload for display. Never used for decisions."""
        raw = await self.kv.get(self.key)
        if raw is None:
            return None
        try:
            return AlertState.model_validate_json(raw)
        except ValidationError:
            return None
