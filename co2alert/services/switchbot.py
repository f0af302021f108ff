"""
SwitchBot API client - CO2 sensor discovery and status

Device discovery runs on every cycle instead of being cached, so a
re-provisioned meter is picked up without a restart.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from co2alert.core.exceptions import ApiError, CO2AlertError, NotFoundError, TransportError
from co2alert.services.signer import Credentials, auth_headers, new_signed_request

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 100
CO2_DEVICE_TYPE = "MeterPro(CO2)"
CO2_MARKER = "CO2"


class SwitchBotDevice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: str = Field(alias="deviceId")
    device_name: str = Field(default="", alias="deviceName")
    device_type: str = Field(default="", alias="deviceType")


class SensorReading(BaseModel):
    """One CO2 meter status snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    co2: int | float = Field(alias="CO2")  # ppm
    temperature: float  # Celsius
    humidity: float  # %
    battery: int | None = None
    device_id: str | None = Field(default=None, alias="deviceId")


@dataclass(frozen=True)
class SensorFetch:
    """Outcome of one discovery + status round trip."""
    reading: SensorReading | None = None
    error: CO2AlertError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.reading is not None


def is_co2_sensor(device: SwitchBotDevice) -> bool:
    # Substring fallback may also match other device types containing "CO2".
    return device.device_type == CO2_DEVICE_TYPE or CO2_MARKER in device.device_type


class SwitchBotClient:
    """Signed access to the SwitchBot cloud API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        credentials: Credentials,
        base_url: str = "https://api.switch-bot.com/v1.1",
        sign_request: Callable = new_signed_request,
    ):
        self.http = http
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._sign_request = sign_request

    async def _get(self, path: str) -> Any:
        """GET a SwitchBot endpoint and return the envelope body."""
        headers = auth_headers(self.credentials, self._sign_request(self.credentials))
        url = f"{self.base_url}{path}"

        try:
            response = await self.http.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"SwitchBot request failed: {e}") from e

        if not response.is_success:
            raise ApiError(
                f"SwitchBot API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError("SwitchBot API returned invalid JSON", status_code=response.status_code) from e

        status_code = data.get("statusCode") if isinstance(data, dict) else None
        if status_code != SUCCESS_STATUS:
            message = data.get("message", "") if isinstance(data, dict) else ""
            raise ApiError(f"SwitchBot API error: {message}", status_code=status_code)

        return data.get("body")

    async def discover_device_id(self) -> str:
        """Return the id of the first CO2 meter in the device list."""
        body = await self._get("/devices")

        try:
            device_list = (body or {}).get("deviceList") or []
            devices = [SwitchBotDevice.model_validate(d) for d in device_list]
        except (ValidationError, AttributeError, TypeError) as e:
            raise ApiError(f"Malformed device list: {e}") from e

        for device in devices:
            if is_co2_sensor(device):
                logger.debug(f"Found CO2 sensor {device.device_id} ({device.device_type})")
                return device.device_id

        raise NotFoundError("CO2 sensor device not found")

    async def get_status(self, device_id: str) -> SensorReading:
        body = await self._get(f"/devices/{device_id}/status")

        try:
            return SensorReading.model_validate(body)
        except ValidationError as e:
            raise ApiError(f"Malformed status for device {device_id}: {e}") from e

    async def fetch_reading(self) -> SensorFetch:
        """Discover the meter and read it, reporting failures as values."""
        try:
            device_id = await self.discover_device_id()
            reading = await self.get_status(device_id)
        except CO2AlertError as e:
            return SensorFetch(error=e)
        return SensorFetch(reading=reading)
