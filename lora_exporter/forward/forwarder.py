"""Webhook forwarder: re-envía los uplinks aceptados a otros endpoints.

Desacopla el request HTTP del reenvío: el handler solo encola el body
(bounded queue) y un worker en background hace el POST a cada URL.

- enqueue() nunca bloquea; con la cola llena el body se descarta
- Un error en una URL no impide el envío a las siguientes
- Sin reintentos
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Iterable, Optional

import requests

from ..metrics import families
from ..metrics.sink import MetricsSink

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_DRAIN_SECONDS = 5.0


class WebhookForwarder:
    """Queue + worker thread que hace POST de cada body a todas las URLs."""

    def __init__(
        self,
        urls: Iterable[str],
        sink: MetricsSink,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.urls = tuple(u for u in urls if u)
        self._sink = sink
        self._timeout = timeout
        self._session = session or requests.Session()
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

        self._enqueued = 0
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.urls)

    def start(self) -> None:
        if not self.enabled or self._worker is not None:
            return
        self._stop_event.clear()
        self._worker = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name="webhook-forwarder",
        )
        self._worker.start()
        logger.info("[FORWARD] Started urls=%s queue_max=%d", ",".join(self.urls), self._queue.maxsize)

    def stop(self, drain: bool = True, drain_timeout: float = DEFAULT_DRAIN_SECONDS) -> None:
        """Detiene el worker.

        Con drain=True espera a que la cola se vacíe, como mucho drain_timeout
        segundos; lo que quede pendiente se descarta.
        """
        if self._worker is None:
            return
        if drain and not self._wait_drained(drain_timeout):
            logger.warning("[FORWARD] Drain timed out pending=%d", self._queue.qsize())
        self._stop_event.set()
        self._worker.join(timeout=5.0)
        self._worker = None
        logger.info("[FORWARD] Stopped. %s", self.stats)

    def _wait_drained(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        with self._queue.all_tasks_done:
            while self._queue.unfinished_tasks:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._queue.all_tasks_done.wait(remaining)
        return True

    def enqueue(self, body: bytes) -> bool:
        """Encola un body para reenvío. Devuelve False si se descartó."""
        if not self.enabled:
            return False
        try:
            self._queue.put_nowait(body)
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning("[FORWARD] Queue full, dropped size=%d", len(body))
            return False
        with self._lock:
            self._enqueued += 1
        logger.debug("[FORWARD] Enqueued size=%d", len(body))
        return True

    def forward(self, body: bytes) -> None:
        """POST síncrono del body a cada URL configurada."""
        for url in self.urls:
            labels = {"url": url}
            try:
                response = self._session.post(
                    url,
                    data=body,
                    headers={"Content-Type": "application/json"},
                    timeout=self._timeout,
                )
            except requests.RequestException as e:
                logger.error("[FORWARD] Failed to forward url=%s error=%s", url, e)
                self._sink.inc_counter(families.FORWARD_ERROR_TOTAL, labels)
                continue

            if response.status_code == 200:
                logger.debug("[FORWARD] Forwarded url=%s status=%d", url, response.status_code)
                self._sink.inc_counter(families.FORWARD_TOTAL, labels)
            else:
                logger.error("[FORWARD] Non-200 reply url=%s status=%d", url, response.status_code)
                self._sink.inc_counter(families.FORWARD_ERROR_TOTAL, labels)

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                body = self._queue.get(timeout=1.0)
            except queue.Empty:
                continue
            try:
                self.forward(body)
            except Exception as e:
                logger.error("[FORWARD] Worker error: %s", e)
            finally:
                self._queue.task_done()

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "queue_depth": self._queue.qsize(),
                "queue_max": self._queue.maxsize,
                "enqueued": self._enqueued,
                "dropped": self._dropped,
            }
