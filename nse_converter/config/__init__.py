"""
Configuration module.

Frozen dataclass defaults, YAML overrides and validation for the converter.
"""

from .defaults import ConverterConfig, get_default_config
from .loader import ConfigLoader

__all__ = ["ConfigLoader", "ConverterConfig", "get_default_config"]
