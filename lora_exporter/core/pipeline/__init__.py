"""Pipeline de normalización: uplink crudo -> emisiones de métricas."""

from .geo_correlator import correlate, find_position
from .normalizer import NormalizeResult, UplinkNormalizer

__all__ = ["NormalizeResult", "UplinkNormalizer", "correlate", "find_position"]
