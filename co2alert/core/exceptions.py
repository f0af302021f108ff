"""
CO2 Alert - Exceptions

Error kinds raised by the sensor, notification and state adapters.
"""


class CO2AlertError(Exception):
    """Base exception for all CO2 alert errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(CO2AlertError):
    """Missing or invalid configuration."""


class TransportError(CO2AlertError):
    """Network or HTTP-layer failure before a response was received."""


class ApiError(CO2AlertError):
    """Remote API answered with a non-success HTTP or envelope status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(CO2AlertError):
    """Expected device is absent from the device list."""


class DeliveryFailure(CO2AlertError):
    """Notification was not delivered."""


class StateStoreError(CO2AlertError):
    """Key-value store read or write failed."""
