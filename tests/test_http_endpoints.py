"""Tests de los endpoints HTTP (webhook, dump, métricas, health).

Ejecutar:
    pytest tests/test_http_endpoints.py -v
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import DRAGINO_EUI, SENSECAP_EUI, make_settings
from lora_exporter.main import create_app
from lora_exporter.metrics.sink import PrometheusSink
from lora_exporter.services import build_services
from lora_exporter.transports.http.endpoints import filter_ascii


@pytest.fixture
def services(tmp_path):
    return build_services(make_settings(tmp_path), sink=PrometheusSink())


@pytest.fixture
def client(services):
    return TestClient(create_app(services=services))


def _dumps(tmp_path):
    folder = tmp_path / "dumps"
    return sorted(folder.glob("*.dump")) if folder.exists() else []


# =============================================================================
# WEBHOOK
# =============================================================================

class TestWebhook:
    """POST / y POST /hook."""

    @pytest.mark.parametrize("path", ["/", "/hook"])
    def test_valid_uplink(self, client, services, uplink_body, path):
        response = client.post(path, content=uplink_body(obj={"TempC_SHT": 21.5}))

        assert response.status_code == 200
        assert response.text == "ok"
        assert services.sink.sample("lora_webhook_total", {"ip": "testclient"}) == 1.0
        assert DRAGINO_EUI in services.registry

    def test_first_uplink_is_dumped(self, client, uplink_body, tmp_path):
        client.post("/", content=uplink_body())
        client.post("/", content=uplink_body())
        assert len(_dumps(tmp_path)) == 1

    def test_debug_dumps_every_uplink(self, tmp_path, uplink_body):
        services = build_services(make_settings(tmp_path, debug=True), sink=PrometheusSink())
        client = TestClient(create_app(services=services))
        client.post("/", content=uplink_body())
        client.post("/", content=uplink_body())
        assert len(_dumps(tmp_path)) == 2

    def test_invalid_body(self, client, services, tmp_path):
        response = client.post("/hook", content=b"not json")

        assert response.status_code == 400
        assert "invalid JSON" in response.text
        assert services.sink.sample("lora_webhook_error_total", {"ip": "testclient"}) == 1.0
        dumps = _dumps(tmp_path)
        assert len(dumps) == 1
        assert dumps[0].read_bytes() == b"not json"

    def test_shape_error_dumped_once(self, client, tmp_path, uplink_body):
        response = client.post("/", content=uplink_body(dev_eui=SENSECAP_EUI, obj={"messages": "bad"}))
        assert response.status_code == 400
        assert len(_dumps(tmp_path)) == 1

    def test_real_ip_header(self, client, services, uplink_body):
        client.post("/", content=uplink_body(), headers={"X-Real-Ip": "10.0.0.1"})
        assert services.sink.sample("lora_webhook_total", {"ip": "10.0.0.1"}) == 1.0

    def test_forwarded_for_header(self, client, services, uplink_body):
        client.post("/", content=uplink_body(), headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.3"})
        assert services.sink.sample("lora_webhook_total", {"ip": "10.0.0.2"}) == 1.0

    def test_ip_port_is_stripped(self, client, services, uplink_body):
        client.post("/", content=uplink_body(), headers={"X-Real-Ip": "10.0.0.4:5555"})
        assert services.sink.sample("lora_webhook_total", {"ip": "10.0.0.4"}) == 1.0

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_other_methods_redirect(self, client, method):
        response = client.request(method.upper(), "/hook", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == "/metrics"

    def test_forward_enqueued_on_success(self, services, uplink_body):
        forwarder = MagicMock()
        forwarder.enabled = True
        services.forwarder = forwarder
        client = TestClient(create_app(services=services))
        body = uplink_body()

        client.post("/", content=body)
        client.post("/", content=b"not json")

        forwarder.enqueue.assert_called_once_with(body)


# =============================================================================
# AUTORIZACIÓN
# =============================================================================

class TestAuthKey:
    """AUTHKEY opcional en el webhook."""

    @pytest.fixture
    def auth_client(self, tmp_path):
        services = build_services(make_settings(tmp_path, auth_key="secret"), sink=PrometheusSink())
        return TestClient(create_app(services=services)), services

    def test_missing_header(self, auth_client, uplink_body):
        client, services = auth_client
        response = client.post("/", content=uplink_body())
        assert response.status_code == 401
        assert len(services.registry) == 0
        assert services.sink.sample("lora_webhook_error_total", {"ip": "testclient"}) == 1.0

    @pytest.mark.parametrize("header", ["secret", "Bearer secret"])
    def test_accepted(self, auth_client, uplink_body, header):
        client, _ = auth_client
        response = client.post("/", content=uplink_body(), headers={"Authorization": header})
        assert response.status_code == 200

    def test_wrong_key(self, auth_client, uplink_body):
        client, _ = auth_client
        response = client.post("/", content=uplink_body(), headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


# =============================================================================
# DUMP / METRICS / HEALTH
# =============================================================================

class TestAuxEndpoints:
    def test_dump(self, client, services, tmp_path):
        response = client.put("/dump", content=b"raw-bytes")

        assert response.status_code == 200
        assert response.text.startswith("dumped to ")
        filename = response.text[len("dumped to "):].strip()
        assert Path(filename).read_bytes() == b"raw-bytes"
        assert services.sink.sample("lora_webhook_total", {"ip": "testclient"}) == 1.0

    def test_metrics_exposition(self, client, uplink_body):
        client.post("/", content=uplink_body(obj={"TempC_SHT": 21.5}))
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "lora_devices_fcnt" in response.text
        assert 'type="airTemperature"' in response.text
        assert "build_info" in response.text

    def test_health(self, client, uplink_body):
        client.post("/", content=uplink_body())
        assert client.get("/health").json() == {"status": "ok", "devices": 1}

    def test_lifespan_starts_and_stops_services(self, tmp_path):
        services = MagicMock()
        with TestClient(create_app(services=services)):
            services.start.assert_called_once()
        services.stop.assert_called_once()


class TestFilterAscii:
    def test_non_ascii_removed(self):
        assert filter_ascii("curl/8.0 ñ✓") == "curl/8.0 "

    def test_none(self):
        assert filter_ascii(None) == ""
