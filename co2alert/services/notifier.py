"""
Notifier - one-shot alert delivery

send() never raises for delivery problems: it logs and returns False so the
caller can leave the alert state untouched and retry on the next cycle.
"""

import logging
from typing import Protocol

import httpx
from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from co2alert.core.config import Settings
from co2alert.core.exceptions import ConfigError, DeliveryFailure
from co2alert.services.switchbot import SensorReading

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, text: str) -> bool: ...

    async def close(self) -> None: ...


def build_alert_message(reading: SensorReading, threshold: int) -> str:
    """Build alert text for a reading above threshold."""
    return (
        f"⚠️ [CO2 alert] Ventilation needed!\n\n"
        f"CO2: {reading.co2} ppm\n"
        f"Temperature: {reading.temperature}°C\n"
        f"Humidity: {reading.humidity}%\n\n"
        f"CO2 has exceeded {threshold} ppm.\n"
        f"Please open a window to ventilate the room."
    )


class LineNotifier:
    """LINE Messaging API push message."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        channel_access_token: str,
        user_id: str,
        push_url: str = "https://api.line.me/v2/bot/message/push",
    ):
        self.http = http
        self.channel_access_token = channel_access_token
        self.user_id = user_id
        self.push_url = push_url

    async def push(self, text: str) -> None:
        """Push a text message, raising DeliveryFailure if LINE rejects it."""
        payload = {
            "to": self.user_id,
            "messages": [{"type": "text", "text": text}],
        }
        headers = {
            "Authorization": f"Bearer {self.channel_access_token}",
            "Content-Type": "application/json",
        }

        try:
            response = await self.http.post(self.push_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise DeliveryFailure(f"LINE Messaging API request failed: {e}") from e

        if not response.is_success:
            raise DeliveryFailure(
                f"LINE Messaging API error: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )

    async def send(self, text: str) -> bool:
        try:
            await self.push(text)
        except DeliveryFailure as e:
            logger.error(str(e))
            return False
        return True

    async def close(self) -> None:
        # The HTTP client is owned by the caller
        pass


class TelegramNotifier:
    """Telegram Bot API message via aiogram."""

    def __init__(self, bot: Bot, chat_id: int | str):
        self.bot = bot
        self.chat_id = chat_id

    async def send(self, text: str) -> bool:
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except TelegramAPIError as e:
            logger.error(f"Telegram API error sending to {self.chat_id}: {e}")
            return False
        return True

    async def close(self) -> None:
        await self.bot.session.close()


def build_notifier(settings: Settings, http: httpx.AsyncClient) -> Notifier:
    """Create the notifier for the configured channel."""
    if settings.channel == "line":
        return LineNotifier(
            http,
            settings.line_channel_access_token,
            settings.line_user_id,
            push_url=settings.line_push_url,
        )
    if settings.channel == "telegram":
        return TelegramNotifier(Bot(token=settings.bot_token), settings.telegram_chat_id)
    raise ConfigError(f"Unknown notify channel: {settings.notify_channel!r}")
