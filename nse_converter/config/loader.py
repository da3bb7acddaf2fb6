"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ConversionParams,
    ConverterConfig,
    DataQualityParams,
    LoggingParams,
    StorageParams,
    SymbolParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "converter.yaml"
PROJECT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

# Mappings replaced as a whole instead of merged key by key
REPLACED_MAPPINGS = frozenset({"overrides"})


def default_config_dir() -> Path:
    """Project config folder in a source checkout, otherwise ./config of the working directory."""
    if PROJECT_CONFIG_DIR.is_dir():
        return PROJECT_CONFIG_DIR
    return Path.cwd() / "config"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ConverterConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = default_config_dir()

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML config file, if present."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_file}: {e}",
                parameter="config_file",
                value=str(config_file),
            )

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping at the top level",
                parameter="config_file",
                value=str(config_file),
            )
        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. converter.yaml in the config directory
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> ConverterConfig:
        """
        Merge, validate and build the typed configuration.

        Raises:
            ConfigurationError: If any merged value fails validation
        """
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            first = errors[0]
            summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
            raise ConfigurationError(
                f"Invalid configuration: {summary}",
                parameter=first.field,
                value=first.value,
                context={"errors": [e.field for e in errors]},
            )

        return build_config(merged)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                elif isinstance(value, dict):
                    result[field_name] = dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (key in result and key not in REPLACED_MAPPINGS
                    and isinstance(result[key], dict) and isinstance(value, dict)):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def build_config(merged: dict[str, Any]) -> ConverterConfig:
    """Build a typed ConverterConfig from a merged, validated dictionary."""
    return ConverterConfig(
        symbols=SymbolParams(**merged.get("symbols", {})),
        conversion=ConversionParams(**merged.get("conversion", {})),
        data_quality=DataQualityParams(**merged.get("data_quality", {})),
        storage=StorageParams(**merged.get("storage", {})),
        logging=LoggingParams(**merged.get("logging", {})),
    )
