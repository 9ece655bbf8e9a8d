"""Persistent tracking map."""

from .models import TrackingRecord
from .store import (
    TRACKING_FILE_NAME,
    TRACKING_SCHEMA_VERSION,
    TrackingMap,
    TrackingSchemaUnsupportedError,
)

__all__ = [
    "TRACKING_FILE_NAME",
    "TRACKING_SCHEMA_VERSION",
    "TrackingMap",
    "TrackingRecord",
    "TrackingSchemaUnsupportedError",
]
