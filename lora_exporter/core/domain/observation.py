"""Modelo de dominio para observaciones de métricas."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


# Tipos reservados para coordenadas (no se geo-etiquetan)
LATITUDE = "latitude"
LONGITUDE = "longitude"


@dataclass(frozen=True)
class GeoPoint:
    """Par latitud/longitud adjunto a una observación geo-etiquetada."""
    latitude: float
    longitude: float

    def as_labels(self) -> dict[str, str]:
        return {"lat": f"{self.latitude:f}", "lon": f"{self.longitude:f}"}


@dataclass(frozen=True)
class MetricObservation:
    """Observación (deviceEui, metricType, value) producida por un decoder.

    metric_type es un string abierto: agregar un tipo nuevo solo requiere
    una entrada nueva en la tabla del decoder.
    """
    dev_eui: str
    metric_type: str
    value: float
    geo: Optional[GeoPoint] = None

    @property
    def is_coordinate(self) -> bool:
        return self.metric_type in (LATITUDE, LONGITUDE)

    def with_geo(self, geo: GeoPoint) -> "MetricObservation":
        return replace(self, geo=geo)
