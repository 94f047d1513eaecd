"""Domain layer - Modelos y contratos."""

from .device import DeviceRecord
from .errors import DirectoryLookupError, PayloadShapeError, UplinkParseError
from .observation import LATITUDE, LONGITUDE, GeoPoint, MetricObservation

__all__ = [
    "DeviceRecord",
    "DirectoryLookupError",
    "GeoPoint",
    "LATITUDE",
    "LONGITUDE",
    "MetricObservation",
    "PayloadShapeError",
    "UplinkParseError",
]
