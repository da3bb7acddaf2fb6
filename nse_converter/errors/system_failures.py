"""
System failure error classifications.

These exceptions represent failures outside the vendor data that stop the
run and require operator intervention.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(SystemFailureError):
    """Invalid run parameters: missing directories or bad config values."""

    def __init__(self, message: str, parameter: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.parameter = parameter
        self.value = value


class PersistenceError(SystemFailureError):
    """File system failures reading vendor files or writing canonical data."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
