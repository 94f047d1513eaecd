"""Fixtures compartidas por los tests del exporter."""

import dataclasses
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import orjson
import pytest

from common.config import Settings
from lora_exporter.core.pipeline.normalizer import UplinkNormalizer
from lora_exporter.device_registry import DeviceRegistry
from lora_exporter.metrics.sink import PrometheusSink

SENSECAP_EUI = "2cf7f1c0440000aa"
DRAGINO_EUI = "a840411234567890"
REJEE_EUI = "cacbb80000000001"
MILESIGHT_EUI = "24e124000000beef"
UNKNOWN_EUI = "0011223344556677"


@pytest.fixture
def sink() -> PrometheusSink:
    """Sink con CollectorRegistry propio (aislado por test)."""
    return PrometheusSink()


@pytest.fixture
def registry() -> DeviceRegistry:
    return DeviceRegistry()


@pytest.fixture
def normalizer(registry, sink) -> UplinkNormalizer:
    return UplinkNormalizer(registry, sink, geo_enabled=False)


@pytest.fixture
def geo_normalizer(registry, sink) -> UplinkNormalizer:
    return UplinkNormalizer(registry, sink, geo_enabled=True)


def build_uplink(
    dev_eui: str = DRAGINO_EUI,
    obj: Optional[Dict[str, Any]] = None,
    device_name: str = "sensor-1",
    **overrides: Any,
) -> Dict[str, Any]:
    """Evento de uplink ChirpStack v4 mínimo y válido."""
    doc: Dict[str, Any] = {
        "deduplicationId": "3b6a1c2e-0000-4000-8000-000000000001",
        "time": "2024-01-31T08:00:00+00:00",
        "deviceInfo": {
            "tenantName": "ChirpStack",
            "applicationName": "sensors",
            "deviceProfileName": "default",
            "deviceName": device_name,
            "devEui": dev_eui,
        },
        "devAddr": "00aabbcc",
        "adr": True,
        "dr": 5,
        "fCnt": 42,
        "fPort": 2,
        "confirmed": False,
        "object": obj if obj is not None else {},
        "rxInfo": [
            {"gatewayId": "gw-01", "uplinkId": 1, "rssi": -97, "snr": 7.5, "channel": 3},
        ],
        "txInfo": {"frequency": 868100000},
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def uplink_body() -> Callable[..., bytes]:
    """Factory: body crudo (bytes) de un uplink."""
    def _make(*args: Any, **kwargs: Any) -> bytes:
        return orjson.dumps(build_uplink(*args, **kwargs))
    return _make


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    """Settings de test: dumps en tmp_path, sin poller ni forwarder."""
    base = Settings(
        interval_seconds=300,
        dump_folder=str(tmp_path / "dumps"),
        listen="127.0.0.1:5672",
        forward_urls=(),
        debug=False,
        api_file="",
        api_key="",
        api_server="",
        auth_key="",
        metrics_geo=False,
        build_version="test",
        build_time="",
        build_branch="",
        build_revision="",
    )
    return dataclasses.replace(base, **overrides)
