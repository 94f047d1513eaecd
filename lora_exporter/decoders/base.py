"""VendorDecoder - Interface base para los decoders de payload de vendor.

Cada vendor implementa esta interface para convertir el blob `object` del
envelope en MetricObservations. Agregar un vendor es agregar una clase y
una entrada en la tabla de OUIs (ver registry.py).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, List, Tuple

from ..core.domain.observation import MetricObservation
from ..schemas import UplinkEnvelope
from .fields import lookup_path, optional_number

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    """Resultado de decodificar el payload de un uplink."""

    observations: List[MetricObservation] = field(default_factory=list)
    needs_dump: bool = False


class VendorDecoder(ABC):
    """Interface común para los decoders de vendor."""

    vendor: ClassVar[str] = "unknown"

    # Solo los decoders que emiten latitude/longitude participan del geo pass
    supports_geo: ClassVar[bool] = False

    @abstractmethod
    def decode(self, envelope: UplinkEnvelope, vendor_key: str) -> DecodeResult:
        """Decodifica el payload del vendor.

        Raises:
            PayloadShapeError: si el payload no tiene una forma soportada.
        """


class FlatFieldDecoder(VendorDecoder):
    """Decoder genérico para payloads con campos numéricos opcionales.

    FIELD_MAP es una tabla (ruta en `object`, metricType) que se recorre en
    orden. Rutas con punto leen sub-objetos ("decoded.battery").
    """

    FIELD_MAP: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    def decode(self, envelope: UplinkEnvelope, vendor_key: str) -> DecodeResult:
        result = DecodeResult()
        obj = envelope.vendor_object
        for path, metric_type in self.FIELD_MAP:
            raw = lookup_path(obj, path)
            value = optional_number(raw)
            if value is None:
                if raw is not None:
                    logger.debug(
                        "[%s] Invalid value skipped dev_eui=%s field=%s raw=%r",
                        self.vendor.upper(), envelope.dev_eui, path, raw,
                    )
                continue
            result.observations.append(
                MetricObservation(envelope.dev_eui, metric_type, value)
            )
        result.observations.extend(self.decode_extra(envelope))
        return result

    def decode_extra(self, envelope: UplinkEnvelope) -> List[MetricObservation]:
        """Hook para campos no numéricos propios del vendor."""
        return []
