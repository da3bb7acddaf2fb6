"""
Canonical data models for converted bar data.

This module defines the structures that flow through the conversion
pipeline: immutable bar records and instrument identifiers, the per-file
batch that collects them, and the run state of a conversion job.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional


class SecurityType(str, Enum):
    """Asset classes, valued by their folder name in the data layout."""
    EQUITY = "equity"
    INDEX = "index"
    FOREX = "forex"
    CFD = "cfd"
    FUTURE = "future"


class Resolution(str, Enum):
    """Bar granularities supported by the canonical storage."""
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"

    @property
    def is_intraday_file(self) -> bool:
        """True when data is stored as one file per trading day."""
        return self in (Resolution.SECOND, Resolution.MINUTE)


class JobState(str, Enum):
    """Lifecycle states of a conversion run."""
    VALIDATING = "validating"
    ENUMERATING = "enumerating"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class InstrumentId:
    """Canonical instrument identifier derived once per source file."""
    symbol: str
    security_type: SecurityType = SecurityType.EQUITY
    market: str = "usa"

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class BarRecord:
    """Normalized OHLCV bar with an exchange-local, minute precision timestamp."""
    time: datetime      # Bar open time, naive exchange-local
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int = 0


@dataclass(frozen=True)
class LineOutcome:
    """Result of parsing one raw vendor line."""

    bar: Optional[BarRecord] = None
    line_number: Optional[int] = None
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.bar is None

    @classmethod
    def parsed(cls, bar: BarRecord, line_number: Optional[int] = None):
        """Create result carrying a parsed bar."""
        return cls(bar=bar, line_number=line_number)

    @classmethod
    def skip(cls, reason: str, line_number: Optional[int] = None):
        """Create result for a benign line that yields no bar."""
        return cls(line_number=line_number, skipped_reason=reason)


@dataclass
class FileBatch:
    """Ordered bars of exactly one source file and one instrument."""

    instrument: InstrumentId
    source_path: Optional[Path] = None
    bars: list[BarRecord] = field(default_factory=list)

    # Data quality bookkeeping
    skipped_lines: int = 0
    ordering_violations: int = 0

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def first_time(self) -> Optional[datetime]:
        return self.bars[0].time if self.bars else None

    @property
    def last_time(self) -> Optional[datetime]:
        return self.bars[-1].time if self.bars else None


@dataclass
class ConversionJob:
    """Run state of one conversion, owned and mutated by the driver."""

    source_dir: Path
    destination_dir: Path
    resolution: Resolution = Resolution.MINUTE
    state: JobState = JobState.VALIDATING

    # Progress counters
    processed_count: int = 0
    total_count: int = 0
    bars_written: int = 0

    # Terminal failure, if any
    error_msg: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (JobState.COMPLETED, JobState.FAILED)

    def record_file(self, bar_count: int) -> None:
        """Count one fully written file."""
        self.processed_count += 1
        self.bars_written += bar_count

    def fail(self, error_msg: str) -> None:
        self.state = JobState.FAILED
        self.error_msg = error_msg
