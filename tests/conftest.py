"""
Pytest configuration and fixtures for CO2 Alert tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Settings are read at import time
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'co2alert_test.db'}",
)
os.environ.setdefault("SWITCHBOT_TOKEN", "test-token")
os.environ.setdefault("SWITCHBOT_SECRET", "test-secret")
os.environ.setdefault("LINE_CHANNEL_ACCESS_TOKEN", "test-line-token")
os.environ.setdefault("LINE_USER_ID", "U1234567890")


class FakeKeyValueStore:
    """In-memory KeyValueStore recording every mutation."""

    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})
        self.puts: list[tuple[str, str]] = []
        self.deletes: list[str] = []

    async def get(self, key):
        return self.data.get(key)

    async def put(self, key, value):
        self.puts.append((key, value))
        self.data[key] = value

    async def delete(self, key):
        self.deletes.append(key)
        self.data.pop(key, None)

    @property
    def mutations(self) -> int:
        return len(self.puts) + len(self.deletes)


class FakeSensor:
    """Stand-in for SwitchBotClient returning a canned fetch result."""

    def __init__(self, fetch):
        self.fetch = fetch
        self.calls = 0

    async def fetch_reading(self):
        self.calls += 1
        return self.fetch


class FakeNotifier:
    """Notifier recording sent texts."""

    def __init__(self, delivered: bool = True):
        self.delivered = delivered
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)
        return self.delivered

    async def close(self):
        pass


@pytest.fixture
def sample_status_body():
    """Device status body as returned by SwitchBot."""
    return {
        "deviceId": "B0E9FE123456",
        "deviceType": "MeterPro(CO2)",
        "temperature": 25.0,
        "humidity": 50,
        "CO2": 3500,
        "battery": 100,
    }


@pytest.fixture
def kv():
    return FakeKeyValueStore()


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Session factory on a fresh SQLite database with all tables."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from co2alert.core.database import Base
    import co2alert.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
