"""Lectura de campos numéricos opcionales en payloads de vendor.

Presencia y valor se tratan por separado: un campo ausente, null, no
numérico, NaN o infinito se considera AUSENTE (None), nunca 0.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional


def optional_number(value: Any) -> Optional[float]:
    """Devuelve el valor como float, o None si no es un número válido."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def lookup_path(obj: Mapping[str, Any], path: str) -> Any:
    """Resuelve una ruta con puntos ("decoded.battery") dentro de dicts anidados."""
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current
