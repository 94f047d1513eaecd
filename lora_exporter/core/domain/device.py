"""Registro de dispositivo conocido por el exporter."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DeviceRecord:
    """Entrada del registro: una por devEui.

    Inmutable: cada actualización reemplaza el registro completo, de modo
    que un lector nunca observa un registro a medio actualizar.
    """
    dev_eui: str
    device_name: str

    def labels(self) -> dict[str, str]:
        """Label set identificador (siempre un dict nuevo)."""
        return {"deviceName": self.device_name, "deviceEui": self.dev_eui}
