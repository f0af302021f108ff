"""
CO2 Alert - Configuration
All settings loaded from environment variables (secrets injected at deploy time)
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (backs the alert state key-value table)
    database_url: str

    # SwitchBot API
    switchbot_token: str = ""
    switchbot_secret: str = ""
    switchbot_api_url: str = "https://api.switch-bot.com/v1.1"

    # Notification channel: "line" or "telegram"
    notify_channel: str = "line"

    # LINE Messaging API
    line_channel_access_token: str = ""
    line_user_id: str = ""
    line_push_url: str = "https://api.line.me/v2/bot/message/push"

    # Telegram Bot (only when notify_channel == "telegram")
    bot_token: str = ""
    telegram_chat_id: str = ""

    # Alerting
    co2_threshold: int = 3000  # ppm
    alert_state_key: str = "co2_alert_active"

    # Scheduling
    schedule_cron: str = "* * * * *"
    poll_interval_seconds: int = 60
    cycle_timeout_seconds: float = 30.0  # 0 disables the per-cycle budget

    log_level: str = "INFO"

    @property
    def channel(self) -> str:
        return self.notify_channel.strip().lower()

    def missing_credentials(self) -> list[str]:
        """Return names of required secrets that are not set."""
        required = {
            "SWITCHBOT_TOKEN": self.switchbot_token,
            "SWITCHBOT_SECRET": self.switchbot_secret,
        }
        if self.channel == "telegram":
            required["BOT_TOKEN"] = self.bot_token
            required["TELEGRAM_CHAT_ID"] = self.telegram_chat_id
        else:
            required["LINE_CHANNEL_ACCESS_TOKEN"] = self.line_channel_access_token
            required["LINE_USER_ID"] = self.line_user_id
        return [name for name, value in required.items() if not value]

    class Config:
        env_file = ".env"  # Fallback for local development
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
