"""Metrics module: metric families and the Prometheus sink."""

from . import families
from .families import Family
from .sink import MetricsSink, PrometheusSink, get_metrics_sink

__all__ = [
    "Family",
    "MetricsSink",
    "PrometheusSink",
    "families",
    "get_metrics_sink",
]
