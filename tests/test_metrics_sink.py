"""Tests del sink de Prometheus."""

import platform

import pytest

from lora_exporter.metrics import families
from lora_exporter.metrics.sink import PrometheusSink, get_metrics_sink

LABELS = {"deviceName": "door-1", "deviceEui": "a840411234567890"}


class TestPrometheusSink:
    def test_gauge_replaces_value(self, sink):
        sink.set_gauge(families.DEVICE_FCNT, LABELS, 10)
        sink.set_gauge(families.DEVICE_FCNT, LABELS, 11)
        assert sink.sample("lora_devices_fcnt", LABELS) == 11.0

    def test_counter_increments(self, sink):
        sink.inc_counter(families.WEBHOOK_TOTAL, {"ip": "10.0.0.1"})
        sink.inc_counter(families.WEBHOOK_TOTAL, {"ip": "10.0.0.1"})
        assert sink.sample("lora_webhook_total", {"ip": "10.0.0.1"}) == 2.0

    def test_unlabeled_counter(self, sink):
        sink.inc_counter(families.API_CONNECTION_TOTAL)
        assert sink.sample("lora_api_connection_total") == 1.0

    def test_missing_label_raises(self, sink):
        with pytest.raises(KeyError):
            sink.set_gauge(families.DEVICE_METRIC, LABELS, 1.0)

    def test_labels_required(self, sink):
        with pytest.raises(ValueError):
            sink.inc_counter(families.WEBHOOK_TOTAL)

    def test_isolated_registries(self):
        a, b = PrometheusSink(), PrometheusSink()
        a.set_gauge(families.DEVICE_FCNT, LABELS, 5)
        assert b.sample("lora_devices_fcnt", LABELS) is None

    def test_render(self, sink):
        sink.set_gauge(families.DEVICE_METRIC, {**LABELS, "type": "airTemperature"}, 21.5)
        body, content_type = sink.render()
        assert content_type.startswith("text/plain")
        assert b"# TYPE lora_devices_metric gauge" in body
        assert b'type="airTemperature"' in body

    def test_build_info(self, sink):
        sink.set_build_info(version="1.2.3", branch="main")
        labels = {
            "appname": "loraExporter",
            "buildVersion": "1.2.3",
            "buildTime": "",
            "buildBranch": "main",
            "buildRevision": "",
            "pythonversion": platform.python_version(),
        }
        assert sink.sample("build_info", labels) == 1.0

    def test_singleton(self):
        PrometheusSink.reset_instance()
        try:
            assert get_metrics_sink() is get_metrics_sink()
        finally:
            PrometheusSink.reset_instance()
