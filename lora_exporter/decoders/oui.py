"""Identificación de vendor por OUI (3 primeros bytes del devEui)."""

from __future__ import annotations

import string

UNKNOWN_OUI = "00:00:00"

_HEX = frozenset(string.hexdigits)


def identify(dev_eui: str) -> str:
    """Deriva el VendorKey `xx:xx:xx` (minúsculas) de un devEui.

    Con menos de 6 caracteres hex al inicio devuelve UNKNOWN_OUI, que
    siempre resuelve al vendor desconocido.
    """
    prefix = (dev_eui or "").strip()[:6]
    if len(prefix) < 6 or not all(c in _HEX for c in prefix):
        return UNKNOWN_OUI
    prefix = prefix.lower()
    return f"{prefix[0:2]}:{prefix[2:4]}:{prefix[4:6]}"
