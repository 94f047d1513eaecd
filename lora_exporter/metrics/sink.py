"""Metrics sink: write-only interface between the core and the exposition.

The normalizer only ever calls set_gauge / inc_counter with a fresh label
dict per emission. PrometheusSink backs it with prometheus_client on its
own CollectorRegistry so several sinks (tests) never collide.
"""

from __future__ import annotations

import logging
import platform
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from .families import ALL_FAMILIES, COUNTER, Family

logger = logging.getLogger(__name__)

_Metric = Union[Counter, Gauge]


class MetricsSink(ABC):
    """Destino de las métricas del core."""

    @abstractmethod
    def set_gauge(self, family: Family, labels: Mapping[str, str], value: float) -> None:
        """Fija el valor de un gauge para el label set dado."""

    @abstractmethod
    def inc_counter(self, family: Family, labels: Optional[Mapping[str, str]] = None) -> None:
        """Incrementa en 1 un counter para el label set dado."""


class PrometheusSink(MetricsSink):
    """Service for exposing exporter metrics in the Prometheus format.

    Thread-safe: prometheus_client children are safe to update concurrently.
    """

    _instance: Optional["PrometheusSink"] = None
    _lock = threading.Lock()

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        families: Iterable[Family] = ALL_FAMILIES,
    ):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, _Metric] = {}
        self._build_info: Optional[Gauge] = None
        for family in families:
            self._register(family)

    @classmethod
    def get_instance(cls) -> "PrometheusSink":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton (for testing)."""
        with cls._lock:
            cls._instance = None

    def _register(self, family: Family) -> None:
        metric_cls = Counter if family.kind == COUNTER else Gauge
        self._metrics[family.name] = metric_cls(
            family.name,
            family.help,
            labelnames=family.labels,
            registry=self.registry,
        )

    def _child(self, family: Family, labels: Optional[Mapping[str, str]]) -> _Metric:
        metric = self._metrics[family.name]
        if not family.labels:
            return metric
        if labels is None:
            raise ValueError(f"{family.name} requires labels {family.labels}")
        return metric.labels(**{name: str(labels[name]) for name in family.labels})

    def set_gauge(self, family: Family, labels: Mapping[str, str], value: float) -> None:
        self._child(family, labels).set(float(value))

    def inc_counter(self, family: Family, labels: Optional[Mapping[str, str]] = None) -> None:
        self._child(family, labels).inc()

    def set_build_info(
        self,
        *,
        version: str = "",
        build_time: str = "",
        branch: str = "",
        revision: str = "",
    ) -> None:
        """Gauge constante `build_info` = 1 con la identidad del build."""
        if self._build_info is None:
            self._build_info = Gauge(
                "build_info",
                "A metric with a constant '1' value labeled by pythonversion used to run the exporter.",
                labelnames=(
                    "appname",
                    "buildVersion",
                    "buildTime",
                    "buildBranch",
                    "buildRevision",
                    "pythonversion",
                ),
                registry=self.registry,
            )
        self._build_info.labels(
            appname="loraExporter",
            buildVersion=version,
            buildTime=build_time,
            buildBranch=branch,
            buildRevision=revision,
            pythonversion=platform.python_version(),
        ).set(1)

    def sample(self, name: str, labels: Optional[Mapping[str, str]] = None) -> Optional[float]:
        """Valor actual de una muestra (None si no existe)."""
        return self.registry.get_sample_value(name, dict(labels or {}))

    def render(self) -> Tuple[bytes, str]:
        """Body + content type para el endpoint /metrics."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


def get_metrics_sink() -> PrometheusSink:
    """Get the process-wide metrics sink."""
    return PrometheusSink.get_instance()
