"""
Per-file batch collection.

Bars are kept in the order their lines appear in the vendor file. The
canonical storage assumes the feed is already time ordered, so a decrease in
timestamps is reported as a data-quality finding and never fixed by sorting.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from ..errors import MalformedDataError, PersistenceError, TemporalDataError
from ..logging.config import get_data_quality_logger
from .models import BarRecord, FileBatch, InstrumentId
from .parsers import DEFAULT_DELIMITER, parse_line
from .validators import BarValidator, is_out_of_order

quality_logger = get_data_quality_logger(__name__)


class FileBatchCollector:
    """Accumulates the parsed bars of one source file in line order."""

    def __init__(
        self,
        instrument: InstrumentId,
        source_path: Optional[Path] = None,
        delimiter: str = DEFAULT_DELIMITER,
        validator: Optional[BarValidator] = None,
        fail_on_out_of_order: bool = False,
    ):
        self.instrument = instrument
        self.source_path = source_path
        self.delimiter = delimiter
        self.validator = validator
        self.fail_on_out_of_order = fail_on_out_of_order

        self._bars: list[BarRecord] = []
        self._skipped = 0
        self._violations = 0
        self._last_time: Optional[datetime] = None
        self._line_number = 0

    def add_line(self, line: str) -> Optional[BarRecord]:
        """
        Parse one line and append its bar, if any.

        Returns:
            The appended bar, or None for a skipped line

        Raises:
            ParseError: If the line is malformed
            InconsistentBarError: If the configured validator rejects the bar
            TemporalDataError: If out-of-order bars are configured to fail
        """
        self._line_number += 1
        outcome = parse_line(line, line_number=self._line_number, delimiter=self.delimiter)

        if outcome.skipped:
            self._skipped += 1
            return None

        bar = outcome.bar
        if self.validator is not None:
            self.validator.validate_bar(bar)

        if is_out_of_order(bar, self._last_time):
            self._record_ordering_violation(bar)

        self._bars.append(bar)
        self._last_time = bar.time
        return bar

    def collect(self, lines: Iterable[str]) -> FileBatch:
        """Add every line in order and return the finished batch."""
        for line in lines:
            self.add_line(line)
        return self.build()

    def build(self) -> FileBatch:
        """Return the batch collected so far."""
        return FileBatch(
            instrument=self.instrument,
            source_path=self.source_path,
            bars=list(self._bars),
            skipped_lines=self._skipped,
            ordering_violations=self._violations,
        )

    def _record_ordering_violation(self, bar: BarRecord) -> None:
        self._violations += 1

        if self.fail_on_out_of_order:
            raise TemporalDataError(
                f"Bar at line {self._line_number} is older than the previous bar: "
                f"{bar.time.isoformat()} < {self._last_time.isoformat()}",
                timestamp=bar.time,
                expected_timestamp=self._last_time,
                context={"source_path": str(self.source_path), "line_number": self._line_number},
            )

        quality_logger.warning(
            "Out of order bar",
            symbol=self.instrument.symbol,
            source_path=str(self.source_path),
            line_number=self._line_number,
            bar_time=bar.time.isoformat(),
            previous_time=self._last_time.isoformat(),
        )


def read_lines(path: Path, encoding: str = "utf-8") -> list[str]:
    """
    Read a vendor file and split it on ``\\n``.

    Carriage returns are left in place; the parser strips them per field.
    """
    try:
        with open(path, encoding=encoding, newline="") as f:
            return f.read().split("\n")
    except UnicodeDecodeError as e:
        raise MalformedDataError(
            f"{path} is not {encoding} text: {e}",
            expected_format=encoding,
            context={"source_path": str(path)},
        ) from e
    except OSError as e:
        raise PersistenceError(
            f"Failed to read {path}: {e}",
            operation="read",
            target=str(path),
        ) from e


def collect_file(
    path: Path,
    instrument: InstrumentId,
    delimiter: str = DEFAULT_DELIMITER,
    encoding: str = "utf-8",
    validator: Optional[BarValidator] = None,
    fail_on_out_of_order: bool = False,
) -> FileBatch:
    """Parse a whole vendor file into a FileBatch."""
    collector = FileBatchCollector(
        instrument,
        source_path=Path(path),
        delimiter=delimiter,
        validator=validator,
        fail_on_out_of_order=fail_on_out_of_order,
    )
    return collector.collect(read_lines(path, encoding=encoding))
