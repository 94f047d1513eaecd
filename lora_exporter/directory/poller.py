"""DeviceStatusPoller - refresco periódico del estado de dispositivos.

Corre en su propio hilo, independiente de los requests. Lee y desaloja
entradas del DeviceRegistry concurrentemente con la normalización.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..core.domain.errors import DirectoryLookupError
from ..device_registry import DeviceRegistry
from ..metrics import families
from ..metrics.sink import MetricsSink
from .client import DeviceDirectory

logger = logging.getLogger(__name__)


class DeviceStatusPoller:
    """Consulta el directorio por cada dispositivo conocido cada `interval` segundos."""

    def __init__(
        self,
        registry: DeviceRegistry,
        directory: DeviceDirectory,
        sink: MetricsSink,
        interval: float,
    ):
        self.registry = registry
        self.directory = directory
        self.sink = sink
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> int:
        """Una pasada sobre el registro. Devuelve cuántos lookups fallaron."""
        known = self.registry.all_known_ids()
        if not known:
            logger.debug("[POLLER] No devices to query")
            return 0

        failures = 0
        unreachable = False
        for dev_eui in known:
            try:
                status = self.directory.lookup_status(dev_eui)
            except DirectoryLookupError as e:
                failures += 1
                unreachable = unreachable or e.unreachable
                self.sink.inc_counter(families.API_ERROR_TOTAL)
                self.registry.evict(dev_eui)
                logger.error(
                    "[POLLER] Failed to get device, will not try again for now dev_eui=%s error=%s",
                    dev_eui, e.reason,
                )
                continue

            self.sink.inc_counter(families.API_TOTAL)
            labels = self.registry.labels_for(dev_eui)
            if labels is None:
                continue
            if status.battery_level is not None and status.battery_level > 0:
                self.sink.set_gauge(families.DEVICE_BATTERY, labels, status.battery_level)
            self.sink.set_gauge(
                families.DEVICE_EXTERNAL_POWER,
                dict(labels),
                1.0 if status.external_power else 0.0,
            )

        if unreachable:
            self.sink.inc_counter(families.API_CONNECTION_ERROR_TOTAL)
        self.sink.inc_counter(families.API_CONNECTION_TOTAL)
        logger.info("[POLLER] Poll done devices=%d failures=%d", len(known), failures)
        return failures

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="device-status-poller")
        self._thread.start()
        logger.info("[POLLER] Started interval=%ss", self.interval)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=5.0)
        self._thread = None
        logger.info("[POLLER] Stopped")

    def _run(self) -> None:
        # Primera pasada después de un intervalo completo
        while not self._stop_event.wait(self.interval):
            try:
                self.poll_once()
            except Exception as e:  # noqa: BLE001
                logger.exception("[POLLER] Poll failed: %s", e)
