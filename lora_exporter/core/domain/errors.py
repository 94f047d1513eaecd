"""Excepciones del dominio de normalización."""

from __future__ import annotations


class UplinkParseError(Exception):
    """El cuerpo del webhook no es un envelope de uplink válido."""


class PayloadShapeError(UplinkParseError):
    """El payload del vendor no tiene ninguna de las formas soportadas."""

    def __init__(self, vendor: str, detail: str):
        super().__init__(f"{vendor} payload shape not supported: {detail}")
        self.vendor = vendor
        self.detail = detail


class DirectoryLookupError(Exception):
    """El directorio de dispositivos no pudo resolver el devEui."""

    def __init__(self, dev_eui: str, reason: str, unreachable: bool = False):
        super().__init__(f"lookup failed for {dev_eui}: {reason}")
        self.dev_eui = dev_eui
        self.reason = reason
        # True cuando el directorio no respondió (red, timeout)
        self.unreachable = unreachable
