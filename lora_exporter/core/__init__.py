"""Core del exporter: dominio y pipeline de normalización."""
