# Database models
from co2alert.models.kv_entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
