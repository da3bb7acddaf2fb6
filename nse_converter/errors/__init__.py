"""
Error classification system for the conversion pipeline.

This module provides the structured exception hierarchy for problems found in
vendor data and for failures of the surrounding system (configuration,
persistence).
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
    TemporalDataError,
    InconsistentBarError,
)
from .system_failures import (
    SystemFailureError,
    ConfigurationError,
    PersistenceError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    "TemporalDataError",
    "InconsistentBarError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
    "PersistenceError",
]
