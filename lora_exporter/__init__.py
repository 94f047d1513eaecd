"""LoRaWAN uplink exporter: ChirpStack webhooks -> Prometheus metrics."""

__version__ = "0.1.0"
