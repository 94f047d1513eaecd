"""Tests del reenvío de webhooks."""

import threading
import time
from unittest.mock import MagicMock

import requests

from lora_exporter.forward.forwarder import WebhookForwarder

URL_A = "http://collector-a.local/hook"
URL_B = "http://collector-b.local/hook"


def _response(status_code):
    response = MagicMock()
    response.status_code = status_code
    return response


class TestForward:
    """POST síncrono a cada URL."""

    def test_success_counts_per_url(self, sink):
        session = MagicMock()
        session.post.return_value = _response(200)
        forwarder = WebhookForwarder([URL_A, URL_B], sink, session=session)

        forwarder.forward(b'{"fCnt": 1}')

        assert session.post.call_count == 2
        _, kwargs = session.post.call_args
        assert kwargs["data"] == b'{"fCnt": 1}'
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert sink.sample("lora_forward_total", {"url": URL_A}) == 1.0
        assert sink.sample("lora_forward_total", {"url": URL_B}) == 1.0

    def test_error_continues_with_next_url(self, sink):
        session = MagicMock()
        session.post.side_effect = [requests.ConnectionError("refused"), _response(200)]
        forwarder = WebhookForwarder([URL_A, URL_B], sink, session=session)

        forwarder.forward(b"{}")

        assert sink.sample("lora_forward_error_total", {"url": URL_A}) == 1.0
        assert sink.sample("lora_forward_total", {"url": URL_B}) == 1.0

    def test_non_200_is_error(self, sink):
        session = MagicMock()
        session.post.return_value = _response(500)
        forwarder = WebhookForwarder([URL_A], sink, session=session)

        forwarder.forward(b"{}")

        assert sink.sample("lora_forward_error_total", {"url": URL_A}) == 1.0
        assert sink.sample("lora_forward_total", {"url": URL_A}) is None


class TestQueue:
    """Cola acotada + worker."""

    def test_disabled_without_urls(self, sink):
        forwarder = WebhookForwarder([], sink, session=MagicMock())
        assert forwarder.enabled is False
        assert forwarder.enqueue(b"{}") is False

    def test_full_queue_drops(self, sink):
        forwarder = WebhookForwarder([URL_A], sink, max_queue_size=1, session=MagicMock())
        assert forwarder.enqueue(b"1") is True
        assert forwarder.enqueue(b"2") is False
        assert forwarder.stats["dropped"] == 1
        assert forwarder.stats["enqueued"] == 1

    def test_worker_forwards_in_background(self, sink):
        done = threading.Event()
        session = MagicMock()

        def post(*args, **kwargs):
            done.set()
            return _response(200)

        session.post.side_effect = post
        forwarder = WebhookForwarder([URL_A], sink, session=session)
        forwarder.start()
        try:
            forwarder.enqueue(b'{"x": 1}')
            assert done.wait(timeout=5.0)
        finally:
            forwarder.stop()

        session.post.assert_called_once()
        assert sink.sample("lora_forward_total", {"url": URL_A}) == 1.0


def _slow_session(delay):
    session = MagicMock()

    def post(*args, **kwargs):
        time.sleep(delay)
        return _response(200)

    session.post.side_effect = post
    return session


class TestStop:
    """stop() nunca espera más de lo acotado aunque la cola esté llena."""

    def test_drain_empties_queue(self, sink):
        session = MagicMock()
        session.post.return_value = _response(200)
        forwarder = WebhookForwarder([URL_A], sink, session=session)
        forwarder.start()
        for i in range(5):
            forwarder.enqueue(b'{"fCnt": %d}' % i)

        forwarder.stop()

        assert session.post.call_count == 5
        assert forwarder.stats["queue_depth"] == 0

    def test_drain_is_bounded(self, sink):
        session = _slow_session(0.05)
        forwarder = WebhookForwarder([URL_A, URL_B], sink, session=session)
        forwarder.start()
        for i in range(50):
            forwarder.enqueue(b'{"fCnt": %d}' % i)

        started = time.monotonic()
        forwarder.stop(drain_timeout=0.2)
        elapsed = time.monotonic() - started

        assert elapsed < 2.0
        assert session.post.call_count < 100
        assert forwarder.stats["queue_depth"] > 0

    def test_no_drain_returns_promptly(self, sink):
        session = _slow_session(0.05)
        forwarder = WebhookForwarder([URL_A], sink, session=session)
        forwarder.start()
        for i in range(50):
            forwarder.enqueue(b'{"fCnt": %d}' % i)

        started = time.monotonic()
        forwarder.stop(drain=False)

        assert time.monotonic() - started < 1.0
        assert session.post.call_count < 50

    def test_stop_without_start(self, sink):
        forwarder = WebhookForwarder([URL_A], sink, session=MagicMock())
        forwarder.stop()
        assert forwarder.stats["queue_depth"] == 0
