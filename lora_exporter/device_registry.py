"""Registro en memoria de dispositivos conocidos.

Caché NO autoritativa: vive lo que vive el proceso y reconstruirla desde
cero siempre es seguro (cada dispositivo se vuelve a anunciar en su
siguiente uplink).

Es el único estado mutable compartido del core: la normalización de
uplinks (varios requests en paralelo) y el poller de estado (otro hilo)
leen y mutan este registro.

REGLAS:
- Un lock exclusivo alrededor de cada acceso al mapa
- Los registros son inmutables; una actualización reemplaza el registro
- Los label sets entregados son siempre dicts nuevos (nunca una referencia
  al estado interno)
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Tuple

from .core.domain.device import DeviceRecord

logger = logging.getLogger(__name__)


def _key(dev_eui: str) -> str:
    return dev_eui.strip().lower()


class DeviceRegistry:
    """Mapa devEui -> DeviceRecord, thread-safe."""

    def __init__(self) -> None:
        self._records: Dict[str, DeviceRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, dev_eui: str, device_name: str) -> bool:
        """Crea o refresca el registro del dispositivo.

        Returns:
            True solo la primera vez que se registra el devEui desde el
            arranque del proceso (o desde su último evict).
        """
        record = DeviceRecord(dev_eui=dev_eui, device_name=device_name)
        key = _key(dev_eui)
        with self._lock:
            first_seen = key not in self._records
            self._records[key] = record
        if first_seen:
            logger.info("[REGISTRY] New device dev_eui=%s name=%s", dev_eui, device_name)
        return first_seen

    def get(self, dev_eui: str) -> Optional[DeviceRecord]:
        with self._lock:
            return self._records.get(_key(dev_eui))

    def labels_for(self, dev_eui: str) -> Optional[Dict[str, str]]:
        """Label set identificador {deviceName, deviceEui} del dispositivo.

        Devuelve un dict nuevo en cada llamada, o None si el devEui no está
        registrado (por ejemplo, si fue desalojado entre tanto).
        """
        record = self.get(dev_eui)
        if record is None:
            return None
        return record.labels()

    def evict(self, dev_eui: str) -> bool:
        """Elimina el registro. Devuelve True si existía."""
        with self._lock:
            removed = self._records.pop(_key(dev_eui), None)
        if removed is not None:
            logger.info("[REGISTRY] Evicted dev_eui=%s", dev_eui)
        return removed is not None

    def all_known_ids(self) -> Tuple[str, ...]:
        """Snapshot de devEuis conocidos (tal como llegaron en el uplink)."""
        with self._lock:
            return tuple(record.dev_eui for record in self._records.values())

    def __contains__(self, dev_eui: object) -> bool:
        if not isinstance(dev_eui, str):
            return False
        with self._lock:
            return _key(dev_eui) in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
