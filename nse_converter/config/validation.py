"""Configuration validation utilities."""

import codecs
from dataclasses import dataclass, fields
from typing import Any

from ..data.models import Resolution, SecurityType
from .defaults import (
    ConversionParams,
    DataQualityParams,
    LoggingParams,
    StorageParams,
    SymbolParams,
)

_SECTIONS = {
    "symbols": SymbolParams,
    "conversion": ConversionParams,
    "data_quality": DataQualityParams,
    "storage": StorageParams,
    "logging": LoggingParams,
}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_symbol_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate symbol resolution parameters."""
        errors = []

        if "overrides" in params:
            value = params["overrides"]
            if not isinstance(value, dict) or not all(
                isinstance(k, str) and isinstance(v, str) and v.strip()
                for k, v in value.items()
            ):
                errors.append(ValidationError(
                    field="overrides",
                    message="Must map filename tokens to non-empty ticker strings",
                    value=value
                ))

        if "security_type" in params:
            value = params["security_type"]
            valid = {s.value for s in SecurityType}
            if value not in valid:
                errors.append(ValidationError(
                    field="security_type",
                    message=f"Must be one of {sorted(valid)}",
                    value=value
                ))

        if "market" in params:
            value = params["market"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ValidationError(
                    field="market",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_conversion_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate source layout parameters."""
        errors = []

        if "resolution" in params:
            value = params["resolution"]
            valid = {r.value for r in Resolution}
            if value not in valid:
                errors.append(ValidationError(
                    field="resolution",
                    message=f"Must be one of {sorted(valid)}",
                    value=value
                ))

        if "delimiter" in params:
            value = params["delimiter"]
            if not isinstance(value, str) or len(value) != 1:
                errors.append(ValidationError(
                    field="delimiter",
                    message="Must be a single character",
                    value=value
                ))

        if "file_extension" in params:
            value = params["file_extension"]
            if not isinstance(value, str) or not value.startswith("."):
                errors.append(ValidationError(
                    field="file_extension",
                    message="Must be a string starting with '.'",
                    value=value
                ))

        if "encoding" in params:
            value = params["encoding"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="encoding",
                    message="Must be a non-empty string",
                    value=value
                ))
            else:
                try:
                    codecs.lookup(value)
                except LookupError:
                    errors.append(ValidationError(
                        field="encoding",
                        message="Unknown text encoding",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_data_quality_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate optional data quality switches."""
        errors = []

        for name in ("enforce_ohlc_consistency", "fail_on_out_of_order"):
            if name in params and not isinstance(params[name], bool):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a boolean",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_storage_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate canonical storage parameters."""
        errors = []

        if "price_scale" in params:
            value = params["price_scale"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="price_scale",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {sorted(_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @staticmethod
    def validate_unknown_keys(config: dict[str, Any]) -> list[ValidationError]:
        """Report sections and keys the converter does not know about."""
        errors = []

        for section, value in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=value
                ))
                continue

            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Section must be a mapping",
                    value=value
                ))
                continue

            known = {f.name for f in fields(_SECTIONS[section])}
            for key in value:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration key",
                        value=value[key]
                    ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = cls.validate_unknown_keys(config)
        if errors:
            return errors

        errors.extend(cls.validate_symbol_params(config.get("symbols", {})))
        errors.extend(cls.validate_conversion_params(config.get("conversion", {})))
        errors.extend(cls.validate_data_quality_params(config.get("data_quality", {})))
        errors.extend(cls.validate_storage_params(config.get("storage", {})))
        errors.extend(cls.validate_logging_params(config.get("logging", {})))

        return errors

