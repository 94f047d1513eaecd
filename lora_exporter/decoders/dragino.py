"""Decoder Dragino - OUI a8:40:41 (LHT52 clima, LDS02 puerta)."""

from __future__ import annotations

from .base import FlatFieldDecoder


class DraginoDecoder(FlatFieldDecoder):
    vendor = "dragino"

    FIELD_MAP = (
        ("TempC_SHT", "airTemperature"),
        ("TempC_DS", "externalTemperature"),
        ("Hum_SHT", "airHumidity"),
        ("LAST_DOOR_OPEN_DURATION", "lastOpenDuration"),
        ("ALARM", "alarm"),
        ("DOOR_OPEN_TIMES", "openCount"),
        ("BAT_V", "batteryVolts"),
        ("MOD", "mod"),
        ("DOOR_OPEN_STATUS", "openStatus"),
    )
