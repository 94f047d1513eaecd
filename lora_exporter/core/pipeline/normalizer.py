"""UplinkNormalizer - Orquestador de la normalización de un uplink.

Convierte el cuerpo crudo de un webhook en emisiones al MetricsSink:

1. Parsear el envelope (error -> resultado con error, dump forzado)
2. Identificar el vendor por OUI del devEui
3. Decodificar el payload del vendor (error de forma -> igual que 1)
4. Upsert en el registro (first_seen se suma a la decisión de dump)
5. Métricas de recepción por cada reporte de gateway
6. fCnt, confirmed/unconfirmed y nivel de error de entrega
7. Correlación geográfica (solo vendors con coordenadas y flag activo)
8. Emitir cada observación con su label set propio

El payload se decodifica ANTES de tocar el registro o el sink: un uplink
con payload inválido no deja ninguna emisión parcial.

Cada emisión construye un dict de labels nuevo a partir del snapshot del
registro; ningún label transitorio (type, lat, lon) se escribe en estado
compartido.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ...decoders import get_decoder, identify
from ...device_registry import DeviceRegistry
from ...metrics import families
from ...metrics.sink import MetricsSink
from ...schemas import UplinkEnvelope, parse_uplink
from ..domain.device import DeviceRecord
from ..domain.errors import UplinkParseError
from ..domain.observation import MetricObservation
from .geo_correlator import correlate

logger = logging.getLogger(__name__)


def _unix_seconds(moment: datetime) -> float:
    # Sin zona horaria se asume UTC, nunca la hora local del host
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


@dataclass
class NormalizeResult:
    """Resultado de normalizar un uplink."""

    dev_eui: str = ""
    needs_dump: bool = False
    error: Optional[str] = None
    first_seen: bool = False
    vendor: str = ""
    observations: List[MetricObservation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class UplinkNormalizer:
    """Normaliza uplinks concurrentemente; sin estado propio mutable."""

    def __init__(
        self,
        registry: DeviceRegistry,
        sink: MetricsSink,
        geo_enabled: bool = False,
    ):
        self.registry = registry
        self.sink = sink
        self.geo_enabled = geo_enabled

    def normalize(self, raw_body: bytes) -> NormalizeResult:
        try:
            envelope = parse_uplink(raw_body)
        except UplinkParseError as e:
            logger.error("[NORMALIZER] Unable to parse uplink: %s", e)
            return NormalizeResult(needs_dump=True, error=str(e))

        dev_eui = envelope.dev_eui
        vendor_key = identify(dev_eui)
        decoder = get_decoder(vendor_key)

        try:
            decoded = decoder.decode(envelope, vendor_key)
        except UplinkParseError as e:
            logger.error(
                "[NORMALIZER] Unable to decode payload dev_eui=%s vendor=%s: %s",
                dev_eui, decoder.vendor, e,
            )
            return NormalizeResult(
                dev_eui=dev_eui,
                needs_dump=True,
                error=str(e),
                vendor=decoder.vendor,
            )

        first_seen = self.registry.upsert(dev_eui, envelope.device_name)
        base_labels = self._device_labels(envelope)

        self._emit_reception(envelope, base_labels)
        self._emit_frame_counters(envelope, base_labels)

        observations = decoded.observations
        if self.geo_enabled and decoder.supports_geo:
            observations = correlate(observations)

        for obs in observations:
            self._emit_observation(obs, base_labels)

        logger.debug(
            "[NORMALIZER] Uplink processed dev_eui=%s vendor=%s observations=%d",
            dev_eui, decoder.vendor, len(observations),
        )

        return NormalizeResult(
            dev_eui=dev_eui,
            needs_dump=decoded.needs_dump or first_seen,
            first_seen=first_seen,
            vendor=decoder.vendor,
            observations=list(observations),
        )

    def _device_labels(self, envelope: UplinkEnvelope) -> Dict[str, str]:
        labels = self.registry.labels_for(envelope.dev_eui)
        if labels is None:
            # Desalojado por el poller entre el upsert y la lectura
            labels = DeviceRecord(envelope.dev_eui, envelope.device_name).labels()
        return labels

    def _emit_reception(self, envelope: UplinkEnvelope, base_labels: Dict[str, str]) -> None:
        seen_at = _unix_seconds(envelope.time) if envelope.time is not None else time.time()
        for rx in envelope.rx_info:
            labels = {"gatewayId": rx.gateway_id, **base_labels}
            self.sink.set_gauge(families.DEVICE_LASTSEEN, labels, seen_at)
            if rx.rssi is not None:
                self.sink.set_gauge(families.DEVICE_RXINFO_RSSI, dict(labels), rx.rssi)
            if rx.snr is not None:
                self.sink.set_gauge(families.DEVICE_RXINFO_SNR, dict(labels), rx.snr)

    def _emit_frame_counters(self, envelope: UplinkEnvelope, base_labels: Dict[str, str]) -> None:
        if envelope.battery_level is not None and envelope.battery_level > 0:
            self.sink.set_gauge(families.DEVICE_BATTERY, dict(base_labels), envelope.battery_level)

        self.sink.set_gauge(families.DEVICE_FCNT, dict(base_labels), envelope.f_cnt)

        if envelope.confirmed:
            self.sink.inc_counter(families.DEVICE_CONFIRMED, dict(base_labels))
        else:
            self.sink.inc_counter(families.DEVICE_UNCONFIRMED, dict(base_labels))

        if envelope.has_delivery_error:
            logger.warning(
                "[NORMALIZER] Delivery issue dev_eui=%s level=%s code=%s description=%s",
                envelope.dev_eui, envelope.level, envelope.code, envelope.description,
            )
            labels = {**base_labels, "level": envelope.level or "", "code": envelope.code or ""}
            self.sink.inc_counter(families.DEVICE_MSG_LEVEL_COUNT, labels)

    def _emit_observation(self, obs: MetricObservation, base_labels: Dict[str, str]) -> None:
        labels = {**base_labels, "type": obs.metric_type}
        if obs.geo is None:
            self.sink.set_gauge(families.DEVICE_METRIC, labels, obs.value)
            return
        labels.update(obs.geo.as_labels())
        self.sink.set_gauge(families.DEVICE_METRIC_GEO, labels, obs.value)
