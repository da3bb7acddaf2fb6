"""Base classes for canonical storage writers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ..data.models import BarRecord, InstrumentId, Resolution


@dataclass
class WriteResult:
    """Result of writing one instrument's bars."""
    instrument: InstrumentId
    resolution: Resolution
    bar_count: int = 0
    files_written: list[Path] = field(default_factory=list)


class CanonicalWriter(ABC):
    """
    Persists ordered bars under a resolution- and instrument-keyed path.

    Implementations fully overwrite any prior content at the target paths and
    raise PersistenceError on failure. A write is complete when the call
    returns.
    """

    @abstractmethod
    def write(
        self,
        resolution: Resolution,
        instrument: InstrumentId,
        destination_root: Path,
        bars: Sequence[BarRecord],
    ) -> WriteResult:
        """
        Write one instrument's bars.

        Args:
            resolution: Target bar resolution
            instrument: Instrument the bars belong to
            destination_root: Root of the canonical data folder
            bars: Bars in the order they must be stored

        Returns:
            WriteResult describing the files written

        Raises:
            PersistenceError: If the bars cannot be persisted
        """
        pass
