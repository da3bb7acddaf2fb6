"""
Canonical storage writers.

Persist ordered bar sequences in the trading engine's on-disk data layout.
"""

from .base import CanonicalWriter, WriteResult
from .lean_writer import LeanDataWriter

__all__ = ["CanonicalWriter", "LeanDataWriter", "WriteResult"]
