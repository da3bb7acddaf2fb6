"""
Vendor line parser for intraday bar text files.

This module turns one comma-separated vendor line into a BarRecord. Field
layout: ``{ignored, date, time, open, high, low, close, [volume]}``, e.g.::

    BANKNIFTY,20150302,09:16,18742.5,18756.2,18738.35,18752.55,0

Lines with two or fewer fields are benign noise (blank lines, trailing
newlines) and are skipped. Any other line either parses completely or raises
a ParseError; nothing is coerced or defaulted except the optional volume.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..errors import MalformedDataError
from .models import BarRecord, LineOutcome

DEFAULT_DELIMITER = ","

# Single culture-invariant format of the reconstructed timestamp
TIMESTAMP_FORMAT = "%Y%m%d %H:%M:%S.%f"
TIMESTAMP_SUFFIX = ":00.0000"

MIN_BAR_FIELDS = 7
VOLUME_INDEX = 7

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_COMPACT_TIME = re.compile(r"^(\d{2})(\d{2})(00)?$")
_DATE_FIELD = re.compile(r"^\d{8}$")
_TIME_FIELD = re.compile(r"^\d{2}:\d{2}$")
_PRICE_FIELD = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$", re.ASCII)
_VOLUME_FIELD = re.compile(r"^[+-]?\d+$", re.ASCII)

# Largest magnitude representable by the engine's 96-bit decimal
MAX_PRICE = Decimal("79228162514264337593543950335")


class ParseError(MalformedDataError):
    """Raised when a vendor line cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.line_number = line_number


class MalformedLineError(ParseError):
    """Raised when a line has too few fields to form a bar."""
    pass


class InvalidTimestampError(ParseError):
    """Raised when date/time fields do not match the fixed format."""
    pass


class InvalidPriceError(ParseError):
    """Raised when a price field is not a finite decimal."""
    pass


class InvalidVolumeError(ParseError):
    """Raised when the volume field is not a 64-bit integer."""
    pass


def split_fields(line: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split a raw line and strip whitespace (including ``\\r``) from each field."""
    return [f.strip() for f in line.split(delimiter)]


def is_skippable(fields: list[str]) -> bool:
    """True for lines too short to be considered for parsing."""
    return len(fields) <= 2


def parse_line(line: str, line_number: Optional[int] = None,
               delimiter: str = DEFAULT_DELIMITER) -> LineOutcome:
    """
    Parse one vendor line into a LineOutcome.

    Args:
        line: Raw text line
        line_number: 1-based position in the file, for error reporting
        delimiter: Field delimiter

    Returns:
        LineOutcome with a bar, or a skip for lines with <= 2 fields

    Raises:
        MalformedLineError: If the line has 3 to 6 fields
        InvalidTimestampError: If date/time do not match the fixed format
        InvalidPriceError: If any of open/high/low/close is not a decimal
        InvalidVolumeError: If a volume field is present but not an int64
    """
    fields = split_fields(line, delimiter)

    if is_skippable(fields):
        return LineOutcome.skip("fewer than 3 fields", line_number=line_number)

    if len(fields) < MIN_BAR_FIELDS:
        raise MalformedLineError(
            f"Expected at least {MIN_BAR_FIELDS} fields, got {len(fields)}",
            line_number=line_number,
            raw_data=line,
            expected_format="symbol,date,time,open,high,low,close[,volume]",
        )

    try:
        bar = _parse_fields(fields)
    except ParseError as e:
        e.line_number = line_number
        e.raw_data = line
        raise

    return LineOutcome.parsed(bar, line_number=line_number)


def parse_bar_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> Optional[BarRecord]:
    """Parse one vendor line, returning None for skipped lines."""
    return parse_line(line, delimiter=delimiter).bar


def _parse_fields(fields: list[str]) -> BarRecord:
    """Parse an already split line with at least MIN_BAR_FIELDS fields."""
    ts = parse_timestamp(fields[1], fields[2])

    open_price = parse_price(fields[3], "open")
    high_price = parse_price(fields[4], "high")
    low_price = parse_price(fields[5], "low")
    close_price = parse_price(fields[6], "close")

    volume = 0
    if len(fields) > VOLUME_INDEX:
        volume = parse_volume(fields[VOLUME_INDEX])

    return BarRecord(
        time=ts,
        open=open_price,
        high=high_price,
        low=low_price,
        close=close_price,
        volume=volume,
    )


def normalize_time_token(time_field: str) -> str:
    """
    Rewrite compact ``HHMM`` / ``HHMM00`` times to the vendor ``HH:MM`` form.

    Other values are returned unchanged and left to fail the fixed format.
    """
    match = _COMPACT_TIME.match(time_field)
    if match:
        return f"{match.group(1)}:{match.group(2)}"
    return time_field


def parse_timestamp(date_field: str, time_field: str) -> datetime:
    """
    Rebuild ``"<yyyyMMdd> <HH:MM>:00.0000"`` and parse it with TIMESTAMP_FORMAT.

    Raises:
        InvalidTimestampError: If the rebuilt text does not match the format
    """
    time_text = normalize_time_token(time_field)
    if not (_DATE_FIELD.match(date_field) and _TIME_FIELD.match(time_text)):
        raise InvalidTimestampError(
            f"Invalid timestamp '{date_field} {time_field}': expected yyyyMMdd and HH:MM",
            expected_format=TIMESTAMP_FORMAT,
        )

    text = f"{date_field} {time_text}{TIMESTAMP_SUFFIX}"
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise InvalidTimestampError(
            f"Invalid timestamp '{date_field} {time_field}': {e}",
            expected_format=TIMESTAMP_FORMAT,
        )


def parse_price(value: str, name: str = "price") -> Decimal:
    """
    Parse an exact decimal price.

    Only plain decimal notation is accepted: an optional sign, digits and an
    optional fractional part. Exponents, digit separators, NaN and Infinity
    are rejected.

    Raises:
        InvalidPriceError: If the value is not a plain decimal or is out of range
    """
    if not _PRICE_FIELD.match(value):
        raise InvalidPriceError(f"Invalid {name} price '{value}': expected a plain decimal number")

    price = Decimal(value)
    if price.copy_abs() > MAX_PRICE:
        raise InvalidPriceError(f"Invalid {name} price '{value}': outside the supported decimal range")

    return price


def parse_volume(value: str) -> int:
    """
    Parse a signed 64-bit integer volume.

    Raises:
        InvalidVolumeError: If the value is not an integer or overflows int64
    """
    if not _VOLUME_FIELD.match(value):
        raise InvalidVolumeError(f"Invalid volume '{value}': expected a whole number")

    try:
        volume = int(value)
    except ValueError as e:
        raise InvalidVolumeError(f"Invalid volume '{value}': {e}")

    if not INT64_MIN <= volume <= INT64_MAX:
        raise InvalidVolumeError(f"Volume '{value}' outside 64-bit integer range")

    return volume
