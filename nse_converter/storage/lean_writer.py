"""
LEAN on-disk layout writer.

Layout written, relative to the destination root::

    <security>/<market>/<resolution>/<symbol>/<yyyyMMdd>_trade.zip   (second, minute)
        <yyyyMMdd>_<symbol>_<resolution>_trade.csv
    <security>/<market>/<resolution>/<symbol>.zip                    (hour, daily)
        <symbol>.csv

Intraday rows start with milliseconds since midnight, hour/daily rows with
``yyyyMMdd HH:mm``. Equity prices are stored as integers scaled by
``price_scale``; other security types are written as plain decimals.
"""

import os
import tempfile
import zipfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from ..data.models import BarRecord, InstrumentId, Resolution, SecurityType
from ..errors import PersistenceError
from ..logging.config import get_logger
from .base import CanonicalWriter, WriteResult

logger = get_logger(__name__)

DEFAULT_PRICE_SCALE = 10000


def normalize_symbol_folder(symbol: str) -> str:
    """Folder and file names use the lower-cased ticker."""
    return symbol.lower()


def build_resolution_dir(root: Path, instrument: InstrumentId, resolution: Resolution) -> Path:
    """Directory holding every symbol of one security type, market and resolution."""
    return Path(root) / instrument.security_type.value / instrument.market.lower() / resolution.value


def build_trade_zip_path(root: Path, instrument: InstrumentId, resolution: Resolution,
                         day: Optional[date] = None) -> Path:
    """Path of the zip archive for one trading day (intraday) or the whole history."""
    symbol = normalize_symbol_folder(instrument.symbol)
    base = build_resolution_dir(root, instrument, resolution)

    if resolution.is_intraday_file:
        if day is None:
            raise ValueError(f"{resolution.value} data requires a trading day")
        return base / symbol / f"{day:%Y%m%d}_trade.zip"
    return base / f"{symbol}.zip"


def build_trade_csv_filename(instrument: InstrumentId, resolution: Resolution,
                             day: Optional[date] = None) -> str:
    """Name of the CSV entry inside the zip archive."""
    symbol = normalize_symbol_folder(instrument.symbol)

    if resolution.is_intraday_file:
        if day is None:
            raise ValueError(f"{resolution.value} data requires a trading day")
        return f"{day:%Y%m%d}_{symbol}_{resolution.value}_trade.csv"
    return f"{symbol}.csv"


def default_file_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def group_bars_by_day(bars: Sequence[BarRecord]) -> dict[date, list[BarRecord]]:
    """Group bars per trading day keeping input order inside each day."""
    days: dict[date, list[BarRecord]] = {}
    for bar in bars:
        days.setdefault(bar.time.date(), []).append(bar)
    return days


class LeanDataWriter(CanonicalWriter):
    """Writes trade bars as zipped CSV files in the LEAN data folder layout."""

    def __init__(self, price_scale: int = DEFAULT_PRICE_SCALE):
        self.price_scale = price_scale

    def write(
        self,
        resolution: Resolution,
        instrument: InstrumentId,
        destination_root: Path,
        bars: Sequence[BarRecord],
    ) -> WriteResult:
        resolution = Resolution(resolution)
        root = Path(destination_root)
        result = WriteResult(instrument=instrument, resolution=resolution)

        if not bars:
            logger.warning("No bars to write", symbol=instrument.symbol, resolution=resolution.value)
            return result

        if resolution.is_intraday_file:
            for day, day_bars in group_bars_by_day(bars).items():
                path = build_trade_zip_path(root, instrument, resolution, day)
                entry = build_trade_csv_filename(instrument, resolution, day)
                self._write_zip(path, entry, [self.format_row(b, instrument, resolution) for b in day_bars])
                result.files_written.append(path)
        else:
            path = build_trade_zip_path(root, instrument, resolution)
            entry = build_trade_csv_filename(instrument, resolution)
            self._write_zip(path, entry, [self.format_row(b, instrument, resolution) for b in bars])
            result.files_written.append(path)

        result.bar_count = len(bars)
        logger.debug(
            "Canonical data written",
            symbol=instrument.symbol,
            resolution=resolution.value,
            bar_count=result.bar_count,
            file_count=len(result.files_written),
        )
        return result

    def format_row(self, bar: BarRecord, instrument: InstrumentId, resolution: Resolution) -> str:
        """Format one bar as a CSV row."""
        if resolution.is_intraday_file:
            t = bar.time
            stamp = str((t.hour * 3600 + t.minute * 60 + t.second) * 1000 + t.microsecond // 1000)
        else:
            stamp = f"{bar.time:%Y%m%d %H:%M}"

        scaled = instrument.security_type == SecurityType.EQUITY
        prices = [self._format_price(p, scaled) for p in (bar.open, bar.high, bar.low, bar.close)]
        return ",".join([stamp, *prices, str(bar.volume)])

    def _format_price(self, price: Decimal, scaled: bool) -> str:
        if scaled:
            # Truncates toward zero, as the engine's reader expects integers
            return str(int(price * self.price_scale))
        return format(price, "f")

    def _write_zip(self, path: Path, entry: str, rows: list[str]) -> None:
        """Replace the archive at path with a single-entry zip."""
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            os.close(fd)

            with zipfile.ZipFile(tmp_name, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                zf.writestr(entry, "\n".join(rows) + "\n")

            # mkstemp creates 0600 files
            os.chmod(tmp_name, default_file_mode())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(
                f"Failed to write {path}: {e}",
                operation="write_zip",
                target=str(path),
            ) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
