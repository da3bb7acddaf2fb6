"""Default configuration parameters for the NSE converter."""

from dataclasses import dataclass, field


def _default_overrides() -> dict[str, str]:
    # Long-form vendor names mapped to the engine's short tickers
    return {"BANKNIFTY": "BNF"}


@dataclass(frozen=True)
class SymbolParams:
    """Symbol resolution parameters."""
    overrides: dict[str, str] = field(default_factory=_default_overrides)
    security_type: str = "equity"                   # Asset class folder
    market: str = "usa"                             # Market folder


@dataclass(frozen=True)
class ConversionParams:
    """Source file layout and target resolution."""
    resolution: str = "minute"
    delimiter: str = ","
    file_extension: str = ".txt"                    # Stripped from the filename token
    encoding: str = "utf-8"


@dataclass(frozen=True)
class DataQualityParams:
    """Optional checks beyond line parsing."""
    enforce_ohlc_consistency: bool = False          # Reject bars whose high/low don't bracket open/close
    fail_on_out_of_order: bool = False              # Abort instead of warn on decreasing timestamps


@dataclass(frozen=True)
class StorageParams:
    """Canonical storage parameters."""
    price_scale: int = 10000                        # Equity prices stored as integer deci-cents


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class ConverterConfig:
    """Complete converter configuration."""
    symbols: SymbolParams
    conversion: ConversionParams
    data_quality: DataQualityParams
    storage: StorageParams
    logging: LoggingParams


def get_default_config() -> ConverterConfig:
    """Get the default configuration instance."""
    return ConverterConfig(
        symbols=SymbolParams(),
        conversion=ConversionParams(),
        data_quality=DataQualityParams(),
        storage=StorageParams(),
        logging=LoggingParams(),
    )
