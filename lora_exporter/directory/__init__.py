"""Directorio externo de dispositivos y poller de estado."""

from .client import ChirpstackDirectory, DeviceDirectory, DeviceStatus
from .poller import DeviceStatusPoller

__all__ = ["ChirpstackDirectory", "DeviceDirectory", "DeviceStatus", "DeviceStatusPoller"]
