"""
Business rule validation for parsed bars.

Line parsing only checks formats. The checks here are optional and are
enabled through the ``data_quality`` configuration section.
"""

from datetime import datetime
from typing import Optional

from ..errors import InconsistentBarError
from .models import BarRecord


class BarValidator:
    """Validates parsed bars against OHLC consistency rules."""

    def __init__(self, enforce_ohlc_consistency: bool = False):
        self.enforce_ohlc_consistency = enforce_ohlc_consistency

    def validate_bar(self, bar: BarRecord) -> None:
        """
        Validate a single bar.

        Raises:
            InconsistentBarError: If consistency checks are enabled and fail
        """
        if not self.enforce_ohlc_consistency:
            return

        if bar.volume < 0:
            raise InconsistentBarError(f"Volume must be non-negative: {bar.volume}", bar=bar)

        if bar.high < max(bar.open, bar.close):
            raise InconsistentBarError(
                f"High {bar.high} must be >= max(open {bar.open}, close {bar.close})",
                bar=bar,
            )

        if bar.low > min(bar.open, bar.close):
            raise InconsistentBarError(
                f"Low {bar.low} must be <= min(open {bar.open}, close {bar.close})",
                bar=bar,
            )


def is_out_of_order(bar: BarRecord, previous_time: Optional[datetime]) -> bool:
    """True when the bar is older than the bar before it in the file."""
    return previous_time is not None and bar.time < previous_time
