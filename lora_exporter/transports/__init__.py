"""Transports - Entradas externas al exporter."""
