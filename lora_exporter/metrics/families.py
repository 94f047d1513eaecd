"""Metric families exposed on /metrics.

Names and label sets are the external contract of the feed; dashboards
depend on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

METRICS_PREFIX = "lora"

COUNTER = "counter"
GAUGE = "gauge"

LABELS_DEVICE = ("deviceName", "deviceEui")
LABELS_DEVICE_GATEWAY = ("gatewayId", "deviceName", "deviceEui")
LABELS_DEVICE_MSG_LEVEL = ("deviceName", "deviceEui", "level", "code")
LABELS_DEVICE_METRIC = ("deviceName", "deviceEui", "type")
LABELS_DEVICE_METRIC_GEO = ("deviceName", "deviceEui", "type", "lat", "lon")
LABELS_FORWARD = ("url",)
LABELS_WEBHOOK = ("ip",)


@dataclass(frozen=True)
class Family:
    name: str
    kind: str
    help: str
    labels: Tuple[str, ...] = ()


def _name(suffix: str) -> str:
    return f"{METRICS_PREFIX}_{suffix}"


WEBHOOK_TOTAL = Family(_name("webhook_total"), COUNTER, "The total number of webhook connections", LABELS_WEBHOOK)
WEBHOOK_ERROR_TOTAL = Family(_name("webhook_error_total"), COUNTER, "The total number of webhook errors", LABELS_WEBHOOK)

FORWARD_TOTAL = Family(_name("forward_total"), COUNTER, "The total number of forwarded webhooks", LABELS_FORWARD)
FORWARD_ERROR_TOTAL = Family(_name("forward_error_total"), COUNTER, "The total number of forwarded webhooks errors", LABELS_FORWARD)

API_CONNECTION_TOTAL = Family(_name("api_connection_total"), COUNTER, "The total number of device status polls")
API_CONNECTION_ERROR_TOTAL = Family(_name("api_connection_error_total"), COUNTER, "The total number of device status poll errors")
API_TOTAL = Family(_name("api_total"), COUNTER, "The total number of device api calls")
API_ERROR_TOTAL = Family(_name("api_error_total"), COUNTER, "The total number of errors for device api calls")

DEVICE_FCNT = Family(_name("devices_fcnt"), GAUGE, "Frame Count of device", LABELS_DEVICE)
DEVICE_UNCONFIRMED = Family(_name("devices_unconfirmed_count"), COUNTER, "unconfirmed count", LABELS_DEVICE)
DEVICE_CONFIRMED = Family(_name("devices_confirmed_count"), COUNTER, "confirmed count", LABELS_DEVICE)
DEVICE_MSG_LEVEL_COUNT = Family(_name("devices_msg_level_count"), COUNTER, "device msg level/type count", LABELS_DEVICE_MSG_LEVEL)
DEVICE_BATTERY = Family(_name("devices_battery_percent"), GAUGE, "Battery level of device", LABELS_DEVICE)
DEVICE_EXTERNAL_POWER = Family(_name("devices_externalpower"), GAUGE, "External powersource of device", LABELS_DEVICE)

DEVICE_METRIC = Family(_name("devices_metric"), GAUGE, "metric value of device", LABELS_DEVICE_METRIC)
DEVICE_METRIC_GEO = Family(_name("devices_metric_geo"), GAUGE, "geo-tagged metric value of device", LABELS_DEVICE_METRIC_GEO)

DEVICE_LASTSEEN = Family(_name("devices_lastseen"), GAUGE, "last seen value of device", LABELS_DEVICE_GATEWAY)
DEVICE_RXINFO_RSSI = Family(_name("devices_rxinfo_rssi_db"), GAUGE, "RSSI of RX from device", LABELS_DEVICE_GATEWAY)
DEVICE_RXINFO_SNR = Family(_name("devices_rxinfo_snr_db"), GAUGE, "SNR of RX from device", LABELS_DEVICE_GATEWAY)

ALL_FAMILIES: Tuple[Family, ...] = (
    WEBHOOK_TOTAL,
    WEBHOOK_ERROR_TOTAL,
    FORWARD_TOTAL,
    FORWARD_ERROR_TOTAL,
    API_CONNECTION_TOTAL,
    API_CONNECTION_ERROR_TOTAL,
    API_TOTAL,
    API_ERROR_TOTAL,
    DEVICE_FCNT,
    DEVICE_UNCONFIRMED,
    DEVICE_CONFIRMED,
    DEVICE_MSG_LEVEL_COUNT,
    DEVICE_BATTERY,
    DEVICE_EXTERNAL_POWER,
    DEVICE_METRIC,
    DEVICE_METRIC_GEO,
    DEVICE_LASTSEEN,
    DEVICE_RXINFO_RSSI,
    DEVICE_RXINFO_SNR,
)
