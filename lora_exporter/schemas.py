"""Esquemas Pydantic del webhook de uplink (ChirpStack v4).

Solo se modelan los campos que el exporter usa o deja pasar; el resto del
documento se ignora. El blob `object` es específico de cada vendor y se
conserva como dict crudo para que cada decoder lo interprete.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import orjson
from pydantic import BaseModel, Field, ValidationError, validator

from .core.domain.errors import UplinkParseError

logger = logging.getLogger(__name__)


class DeviceInfo(BaseModel):
    """Bloque deviceInfo del evento de uplink."""

    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    tenant_name: Optional[str] = Field(default=None, alias="tenantName")
    application_id: Optional[str] = Field(default=None, alias="applicationId")
    application_name: Optional[str] = Field(default=None, alias="applicationName")
    device_profile_id: Optional[str] = Field(default=None, alias="deviceProfileId")
    device_profile_name: Optional[str] = Field(default=None, alias="deviceProfileName")
    device_name: str = Field(default="", alias="deviceName")
    dev_eui: str = Field(..., alias="devEui")

    class Config:
        populate_by_name = True
        frozen = True

    @validator("dev_eui")
    def validate_dev_eui(cls, v):
        if not v or not v.strip():
            raise ValueError("devEui is required")
        return v.strip()

    @validator("device_name", pre=True)
    def none_name_is_empty(cls, v):
        return "" if v is None else v


class RxInfo(BaseModel):
    """Reporte de recepción de un gateway."""

    gateway_id: str = Field(default="", alias="gatewayId")
    uplink_id: Optional[int] = Field(default=None, alias="uplinkId")
    rssi: Optional[float] = None
    snr: Optional[float] = None
    channel: Optional[int] = None
    crc_status: Optional[str] = Field(default=None, alias="crcStatus")

    class Config:
        populate_by_name = True
        frozen = True


class UplinkEnvelope(BaseModel):
    """Evento de uplink genérico.

    Formato esperado (recortado):
    {
        "deduplicationId": "...",
        "time": "2024-01-31T08:00:00.123456Z",
        "deviceInfo": {"deviceName": "door-1", "devEui": "a840411234567890"},
        "fCnt": 12,
        "confirmed": false,
        "object": {...},
        "rxInfo": [{"gatewayId": "...", "rssi": -97, "snr": 7.5}]
    }
    """

    deduplication_id: Optional[str] = Field(default=None, alias="deduplicationId")
    time: Optional[datetime] = None
    device_info: DeviceInfo = Field(..., alias="deviceInfo")

    # Problemas de entrega reportados por el network server
    level: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None

    dev_addr: Optional[str] = Field(default=None, alias="devAddr")
    adr: bool = False
    dr: Optional[int] = None
    f_cnt: int = Field(default=0, alias="fCnt")
    f_port: Optional[int] = Field(default=None, alias="fPort")
    confirmed: bool = False
    data: Optional[str] = None

    margin: Optional[int] = None
    external_power_source: Optional[bool] = Field(default=None, alias="externalPowerSource")
    battery_level_unavailable: Optional[bool] = Field(default=None, alias="batteryLevelUnavailable")
    battery_level: Optional[float] = Field(default=None, alias="batteryLevel")

    vendor_object: Dict[str, Any] = Field(default_factory=dict, alias="object")
    rx_info: List[RxInfo] = Field(default_factory=list, alias="rxInfo")
    tx_info: Dict[str, Any] = Field(default_factory=dict, alias="txInfo")

    class Config:
        populate_by_name = True
        frozen = True

    @validator("vendor_object", "tx_info", pre=True)
    def null_object_is_empty(cls, v):
        return {} if v is None else v

    @validator("rx_info", pre=True)
    def null_rx_info_is_empty(cls, v):
        return [] if v is None else v

    @validator("f_cnt", pre=True)
    def null_fcnt_is_zero(cls, v):
        return 0 if v is None else v

    @property
    def dev_eui(self) -> str:
        return self.device_info.dev_eui

    @property
    def device_name(self) -> str:
        return self.device_info.device_name

    @property
    def has_delivery_error(self) -> bool:
        return bool(self.level)


def parse_uplink(raw_body: bytes) -> UplinkEnvelope:
    """Parsea el cuerpo crudo del webhook a UplinkEnvelope.

    Raises:
        UplinkParseError: JSON inválido o documento sin la forma esperada.
    """
    try:
        data = orjson.loads(raw_body)
    except orjson.JSONDecodeError as e:
        raise UplinkParseError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise UplinkParseError(f"expected JSON object, got {type(data).__name__}")

    try:
        return UplinkEnvelope(**data)
    except ValidationError as e:
        logger.debug("[SCHEMA] Envelope validation failed: %s", e)
        raise UplinkParseError(f"invalid uplink envelope: {e}") from e
