"""
Runtime wiring - builds a ready AlertController from settings
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from co2alert.core.config import Settings
from co2alert.services.alert_controller import AlertController
from co2alert.services.alert_state import AlertStateStore
from co2alert.services.kv_store import SqlKeyValueStore
from co2alert.services.notifier import build_notifier
from co2alert.services.signer import Credentials
from co2alert.services.switchbot import SwitchBotClient


@asynccontextmanager
async def open_controller(
    settings: Settings,
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AlertController]:
    """Yield a controller whose HTTP client and notifier are closed on exit."""
    async with httpx.AsyncClient() as http:
        sensor = SwitchBotClient(
            http,
            Credentials(token=settings.switchbot_token, secret=settings.switchbot_secret),
            base_url=settings.switchbot_api_url,
        )
        state = AlertStateStore(SqlKeyValueStore(session_maker), key=settings.alert_state_key)
        notifier = build_notifier(settings, http)
        try:
            yield AlertController(sensor, state, notifier, threshold=settings.co2_threshold)
        finally:
            await notifier.close()
