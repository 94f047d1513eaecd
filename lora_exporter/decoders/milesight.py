"""Decoder Milesight - OUI 24:e1:24 (sensores de distancia / inclinación).

Temperatura, humedad y batería pueden venir en `decoded` y también en el
nivel plano. Se emiten las dos lecturas cuando ambas están presentes; la de
`decoded` va primero.
"""

from __future__ import annotations

from typing import List

from ..core.domain.observation import MetricObservation
from ..schemas import UplinkEnvelope
from .base import FlatFieldDecoder

POSITION_NORMAL = "normal"


class MilesightDecoder(FlatFieldDecoder):
    vendor = "milesight"

    FIELD_MAP = (
        ("decoded.temperature", "airTemperature"),
        ("temperature", "airTemperature"),
        ("decoded.humidity", "airHumidity"),
        ("humidity", "airHumidity"),
        ("distance", "distance"),
        ("decoded.battery", "battery"),
        ("battery", "battery"),
    )

    def decode_extra(self, envelope: UplinkEnvelope) -> List[MetricObservation]:
        position = envelope.vendor_object.get("position")
        if not isinstance(position, str) or not position:
            return []
        # "normal" -> 0, cualquier otro valor ("tilt") -> 1
        value = 0.0 if position == POSITION_NORMAL else 1.0
        return [MetricObservation(envelope.dev_eui, "position", value)]
