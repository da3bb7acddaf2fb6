"""
Data quality error classifications for vendor bar files.

These exceptions categorize problems found in the raw input. None of them is
retried: the input files are static, so a second read reproduces the error.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Base class for problems in the vendor data itself."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class TemporalDataError(DataQualityError):
    """Bars appear out of time order within a file."""

    def __init__(self, message: str, timestamp: Optional[Any] = None,
                 expected_timestamp: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.expected_timestamp = expected_timestamp


class InconsistentBarError(DataQualityError):
    """High/low prices do not bracket open/close, or volume is negative."""

    def __init__(self, message: str, bar: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.bar = bar
