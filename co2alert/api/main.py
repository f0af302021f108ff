"""
CO2 Alert - Debug API Server

Provides endpoints for:
- Manual trigger of one scheduled evaluation cycle
- Current alert state
- Health check
"""

import logging
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse

from co2alert.core.config import settings
from co2alert.core.database import async_session_maker
from co2alert.services.alert_controller import AlertController
from co2alert.services.alert_state import AlertStateStore
from co2alert.services.kv_store import SqlKeyValueStore
from co2alert.services.runtime import open_controller

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ==================== DEPENDENCIES ====================

async def get_controller() -> AsyncIterator[AlertController]:
    async with open_controller(settings, async_session_maker) as controller:
        yield controller


def get_alert_state() -> AlertStateStore:
    return AlertStateStore(SqlKeyValueStore(async_session_maker), key=settings.alert_state_key)


# ==================== APP ====================

app = FastAPI(
    title="CO2 Alert API",
    description="Debug endpoints for the SwitchBot CO2 alert worker",
    version=VERSION,
)


@app.get("/", response_class=PlainTextResponse)
async def root(request: Request):
    """Instructions for triggering the scheduled cycle by hand."""
    url = request.url.replace(path="/__scheduled", query="cron=*+*+*+*+*")
    return (
        f"To test the scheduled handler, make sure the SwitchBot and notification "
        f"secrets are configured, then try running \"curl {url}\"."
    )


@app.get("/__scheduled")
async def trigger_scheduled(
    cron: str = Query("* * * * *"),
    controller: AlertController = Depends(get_controller),
):
    """Run one evaluation cycle now, as the scheduler would."""
    logger.info(f"[{cron}] Manual cycle triggered")
    result = await controller.run_cycle(cron)
    return {
        "cron": cron,
        "outcome": result.outcome.value,
        "reading": result.reading.model_dump() if result.reading else None,
    }


@app.get("/api/alert")
async def get_alert(state: AlertStateStore = Depends(get_alert_state)):
    """Current alert state."""
    current = await state.current()
    return {
        "active": await state.is_active(),
        "state": current.model_dump(mode="json") if current else None,
    }


# ==================== HEALTH CHECK ====================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": VERSION,
    }


# ==================== MAIN ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
