"""Cliente del directorio de dispositivos (ChirpStack REST API).

Solo se usa para refrescar batería / alimentación externa de los
dispositivos conocidos. Un error de lookup no es fatal: el poller desaloja
el dispositivo del registro hasta su próximo uplink.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests

from ..core.domain.errors import DirectoryLookupError
from ..decoders.fields import optional_number

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class DeviceStatus:
    battery_level: Optional[float] = None
    external_power: Optional[bool] = None


class DeviceDirectory(ABC):
    """Fuente externa del estado de los dispositivos."""

    @abstractmethod
    def lookup_status(self, dev_eui: str) -> DeviceStatus:
        """Raises: DirectoryLookupError si el dispositivo no existe o el directorio no responde."""


class ChirpstackDirectory(DeviceDirectory):
    """GET {server}/api/devices/{devEui} con token Bearer."""

    def __init__(
        self,
        api_server: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        server = api_server.rstrip("/")
        if server and "://" not in server:
            server = f"http://{server}"
        self.base_url = server
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Grpc-Metadata-Authorization": f"Bearer {api_key}",
        })

    def lookup_status(self, dev_eui: str) -> DeviceStatus:
        url = f"{self.base_url}/api/devices/{dev_eui}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise DirectoryLookupError(dev_eui, str(e), unreachable=True) from e

        if response.status_code != 200:
            raise DirectoryLookupError(dev_eui, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise DirectoryLookupError(dev_eui, f"invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise DirectoryLookupError(dev_eui, "unexpected response shape")
        status = body.get("deviceStatus") or {}
        if not isinstance(status, dict):
            raise DirectoryLookupError(dev_eui, "unexpected response shape")
        external = status.get("externalPowerSource")
        return DeviceStatus(
            battery_level=optional_number(status.get("batteryLevel")),
            external_power=bool(external) if external is not None else None,
        )
