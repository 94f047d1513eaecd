"""Vendor identification and payload decoders."""

from .base import DecodeResult, FlatFieldDecoder, VendorDecoder
from .oui import UNKNOWN_OUI, identify
from .registry import DECODERS, UnknownVendorDecoder, get_decoder

__all__ = [
    "DECODERS",
    "DecodeResult",
    "FlatFieldDecoder",
    "UNKNOWN_OUI",
    "UnknownVendorDecoder",
    "VendorDecoder",
    "get_decoder",
    "identify",
]
