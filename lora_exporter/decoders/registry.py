"""Tabla OUI -> decoder de vendor.

Agregar un vendor: implementar VendorDecoder y registrar su OUI aquí.
"""

from __future__ import annotations

import logging
from typing import Dict

from ..schemas import UplinkEnvelope
from .base import DecodeResult, VendorDecoder
from .dragino import DraginoDecoder
from .milesight import MilesightDecoder
from .rejee import RejeeDecoder
from .sensecap import SenseCapDecoder

logger = logging.getLogger(__name__)


class UnknownVendorDecoder(VendorDecoder):
    """OUI sin decoder: no es un error, pero se fuerza el dump del payload."""

    vendor = "unknown"

    def decode(self, envelope: UplinkEnvelope, vendor_key: str) -> DecodeResult:
        logger.warning(
            "[DECODER] Unsupported OUI dev_eui=%s oui=%s",
            envelope.dev_eui, vendor_key,
        )
        return DecodeResult(needs_dump=True)


_UNKNOWN = UnknownVendorDecoder()

DECODERS: Dict[str, VendorDecoder] = {
    "2c:f7:f1": SenseCapDecoder(),
    "a8:40:41": DraginoDecoder(),
    "ca:cb:b8": RejeeDecoder(),
    "24:e1:24": MilesightDecoder(),
}


def get_decoder(vendor_key: str) -> VendorDecoder:
    """Devuelve el decoder del OUI, o el decoder desconocido."""
    return DECODERS.get(vendor_key, _UNKNOWN)
