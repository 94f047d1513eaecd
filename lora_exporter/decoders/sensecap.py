"""Decoder SenseCAP (Seeed) - OUI 2c:f7:f1.

El payload trae una lista `messages` de registros {type, measurementId,
measurementValue}. En campo se observó que a veces la lista llega anidada
(lista de listas); se intenta primero la forma plana y luego se aplana un
nivel. Si ninguna de las dos valida, es un error de forma (único fallo duro
de decodificación).

Tabla de measurementId: https://sensecap-docs.seeed.cc/measurement_list.html
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, validator

from ..core.domain.errors import PayloadShapeError
from ..core.domain.observation import LATITUDE, LONGITUDE, MetricObservation
from ..schemas import UplinkEnvelope
from .base import DecodeResult, VendorDecoder
from .fields import optional_number

logger = logging.getLogger(__name__)

MSG_REPORT_TELEMETRY = "report_telemetry"
MSG_UPLOAD_BATTERY = "upload_battery"
MSG_UPLOAD_INTERVAL = "upload_interval"

MEASUREMENT_TYPES: Dict[int, str] = {
    4097: "airTemperature",
    4098: "airHumidity",
    4099: "lightIntensity",
    4100: "co2",
    4101: "barometricPressure",
    4102: "soilTemperature",
    4103: "soilMoisture",
    4104: "windDirection",
    4105: "windSpeed",
    4106: "ph",
    4107: "lightQuantum",
    4108: "electricalConductivity",
    4110: "soilVolumetricWaterContent",
    4113: "rainfallHourly",
    4115: "distance",
    4124: "waterTemperature",
    4190: "uvIndex",
    4197: LONGITUDE,
    4198: LATITUDE,
    4199: "lightPercent",
}


class SenseCapMessage(BaseModel):
    """Un registro de la lista `messages`."""

    type: str = ""
    measurement_id: Optional[float] = Field(default=None, alias="measurementId")
    measurement_value: Optional[float] = Field(default=None, alias="measurementValue")
    battery: Optional[float] = None
    interval: Optional[float] = None

    class Config:
        populate_by_name = True

    @validator("measurement_id", "measurement_value", "battery", "interval", pre=True)
    def invalid_number_is_absent(cls, v):
        return optional_number(v)

    @validator("type", pre=True)
    def none_type_is_empty(cls, v):
        return "" if v is None else str(v)

    @property
    def metric_type(self) -> Optional[str]:
        mid = self.measurement_id
        if mid is None or not mid.is_integer():
            return None
        return MEASUREMENT_TYPES.get(int(mid))


class SenseCapPayload(BaseModel):
    messages: List[SenseCapMessage] = Field(default_factory=list)

    @validator("messages", pre=True)
    def null_messages_is_empty(cls, v):
        return [] if v is None else v


class SenseCapNestedPayload(BaseModel):
    messages: List[List[SenseCapMessage]]


def parse_messages(obj: Dict[str, Any]) -> List[SenseCapMessage]:
    """Extrae la lista de mensajes, plana o anidada un nivel.

    Raises:
        PayloadShapeError: si ninguna forma valida.
    """
    try:
        return SenseCapPayload(**obj).messages
    except ValidationError as flat_error:
        logger.debug("[SENSECAP] Flat messages rejected, trying nested: %s", flat_error)

    try:
        nested = SenseCapNestedPayload(**obj)
    except ValidationError as e:
        raise PayloadShapeError("sensecap", str(e)) from e

    return [message for inner in nested.messages for message in inner]


class SenseCapDecoder(VendorDecoder):
    """Decoder para la familia SenseCAP (sensores de clima/batería)."""

    vendor = "sensecap"
    supports_geo = True

    def decode(self, envelope: UplinkEnvelope, vendor_key: str) -> DecodeResult:
        dev_eui = envelope.dev_eui
        result = DecodeResult()

        for message in parse_messages(envelope.vendor_object):
            observation = self._decode_message(dev_eui, message)
            if observation is not None:
                result.observations.append(observation)

        return result

    def _decode_message(
        self, dev_eui: str, message: SenseCapMessage
    ) -> Optional[MetricObservation]:
        if message.type == MSG_REPORT_TELEMETRY:
            metric_type = message.metric_type
            if metric_type is None:
                # Anomalía blanda: se omite solo esta medición
                logger.error(
                    "[SENSECAP] MeasurementId %s is not supported dev_eui=%s",
                    message.measurement_id, dev_eui,
                )
                return None
            if message.measurement_value is None:
                logger.debug(
                    "[SENSECAP] Missing measurementValue dev_eui=%s type=%s",
                    dev_eui, metric_type,
                )
                return None
            return MetricObservation(dev_eui, metric_type, message.measurement_value)

        if message.type == MSG_UPLOAD_BATTERY:
            if message.battery is None:
                return None
            return MetricObservation(dev_eui, "battery", message.battery)

        if message.type == MSG_UPLOAD_INTERVAL:
            if message.interval is None:
                return None
            return MetricObservation(dev_eui, "interval", message.interval)

        logger.debug("[SENSECAP] Message type %r ignored dev_eui=%s", message.type, dev_eui)
        return None
