"""Correlación geográfica de un batch de observaciones.

Empareja las coordenadas (latitude/longitude) de un uplink con el resto de
lecturas del mismo batch y produce copias geo-etiquetadas.

NOTA: se usa el ÚLTIMO par lat/lon visto en el batch para TODAS las
lecturas, incluso las que aparecen antes de las coordenadas. El orden del
batch no se interpreta como ciclo de lectura (pendiente de confirmar con el
dueño del sistema si debería emparejarse por proximidad temporal).
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..domain.observation import LATITUDE, LONGITUDE, GeoPoint, MetricObservation


def find_position(observations: Iterable[MetricObservation]) -> Optional[GeoPoint]:
    """Primera pasada: último longitude y último latitude (last-write-wins)."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    for obs in observations:
        if obs.metric_type == LATITUDE:
            latitude = obs.value
        elif obs.metric_type == LONGITUDE:
            longitude = obs.value
    if latitude is None or longitude is None:
        return None
    return GeoPoint(latitude=latitude, longitude=longitude)


def correlate(observations: List[MetricObservation]) -> List[MetricObservation]:
    """Devuelve el batch de entrada más una copia geo-etiquetada por lectura.

    Las observaciones planas se conservan sin cambios. Las coordenadas
    nunca se geo-etiquetan. Sin par completo lat/lon el batch se devuelve
    tal cual.
    """
    position = find_position(observations)
    if position is None:
        return list(observations)

    tagged = [
        obs.with_geo(position)
        for obs in observations
        if not obs.is_coordinate and obs.geo is None
    ]
    return list(observations) + tagged
