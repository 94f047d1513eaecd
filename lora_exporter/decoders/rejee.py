"""Decoder Rejee - OUI ca:cb:b8."""

from __future__ import annotations

from .base import FlatFieldDecoder


class RejeeDecoder(FlatFieldDecoder):
    vendor = "rejee"

    FIELD_MAP = (
        ("battery", "battery"),
        ("temperature", "airTemperature"),
        ("humidity", "airHumidity"),
        ("vol", "vol"),
    )
