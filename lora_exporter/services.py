"""Contenedor de los componentes de un proceso del exporter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from common.config import Settings

from .core.pipeline.normalizer import UplinkNormalizer
from .device_registry import DeviceRegistry
from .directory.client import ChirpstackDirectory
from .directory.poller import DeviceStatusPoller
from .forward.forwarder import WebhookForwarder
from .metrics.sink import PrometheusSink, get_metrics_sink
from .storage.dump_store import DumpStore

logger = logging.getLogger(__name__)


@dataclass
class ExporterServices:
    settings: Settings
    registry: DeviceRegistry
    sink: PrometheusSink
    normalizer: UplinkNormalizer
    dump_store: DumpStore
    forwarder: WebhookForwarder
    poller: Optional[DeviceStatusPoller] = None

    def start(self) -> None:
        """Arranca las tareas en background (forwarder y poller)."""
        self.forwarder.start()
        if self.poller is not None:
            self.poller.start()

    def stop(self) -> None:
        if self.poller is not None:
            self.poller.stop()
        self.forwarder.stop()


def build_services(
    settings: Settings,
    sink: Optional[PrometheusSink] = None,
    registry: Optional[DeviceRegistry] = None,
) -> ExporterServices:
    """Construye el grafo de componentes a partir de la configuración."""
    sink = sink if sink is not None else get_metrics_sink()
    registry = registry if registry is not None else DeviceRegistry()

    sink.set_build_info(
        version=settings.build_version,
        build_time=settings.build_time,
        branch=settings.build_branch,
        revision=settings.build_revision,
    )

    poller: Optional[DeviceStatusPoller] = None
    api_key = settings.resolve_api_key()
    if api_key and settings.api_server:
        poller = DeviceStatusPoller(
            registry=registry,
            directory=ChirpstackDirectory(settings.api_server, api_key),
            sink=sink,
            interval=settings.interval_seconds,
        )
    else:
        logger.info("[SERVICES] No API key or server configured, device status poller disabled")

    return ExporterServices(
        settings=settings,
        registry=registry,
        sink=sink,
        normalizer=UplinkNormalizer(registry, sink, geo_enabled=settings.metrics_geo),
        dump_store=DumpStore(settings.dump_folder),
        forwarder=WebhookForwarder(settings.forward_urls, sink),
        poller=poller,
    )
