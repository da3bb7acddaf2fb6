"""Pytest configuration and shared fixtures."""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

import pytest

from nse_converter.data.models import BarRecord, InstrumentId, SecurityType
from nse_converter.storage.base import CanonicalWriter


NIFTY_LINE = "IDX,20190226,091500,10800.00,10810.50,10795.25,10805.75,0"


@pytest.fixture
def nifty_line() -> str:
    """Single well-formed vendor line with volume."""
    return NIFTY_LINE


@pytest.fixture
def vendor_lines() -> list[str]:
    """Vendor lines in the HH:MM layout, interleaved with blank noise."""
    return [
        "BANKNIFTY,20150302,09:16,18742.5,18756.2,18738.35,18752.55,0",
        "",
        "BANKNIFTY,20150302,09:17,18752.55,18760,18745.1,18758.9",
        "\r",
        "BANKNIFTY,20150302,09:18,18758.9,18770.25,18755,18766.4,1200\r",
        "",
    ]


@pytest.fixture
def sample_bar() -> BarRecord:
    """Sample parsed bar."""
    return BarRecord(
        time=datetime(2019, 2, 26, 9, 15),
        open=Decimal("10800.00"),
        high=Decimal("10810.50"),
        low=Decimal("10795.25"),
        close=Decimal("10805.75"),
        volume=0,
    )


@pytest.fixture
def nifty() -> InstrumentId:
    return InstrumentId(symbol="NIFTY", security_type=SecurityType.EQUITY, market="usa")


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def destination_dir(tmp_path: Path) -> Path:
    path = tmp_path / "destination"
    path.mkdir()
    return path


@pytest.fixture
def mock_writer() -> Mock:
    """Writer double recording every write call."""
    return Mock(spec=CanonicalWriter)
