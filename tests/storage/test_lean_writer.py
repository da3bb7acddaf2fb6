"""Tests for the LEAN layout writer."""

import os
import stat
import zipfile
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from nse_converter.data.models import BarRecord, InstrumentId, Resolution, SecurityType
from nse_converter.errors import PersistenceError
from nse_converter.storage.lean_writer import (
    LeanDataWriter,
    build_trade_csv_filename,
    build_trade_zip_path,
    group_bars_by_day,
)


def _bar(ts: datetime, o="10800.00", h="10810.50", l="10795.25", c="10805.75", v=0) -> BarRecord:
    return BarRecord(ts, Decimal(o), Decimal(h), Decimal(l), Decimal(c), v)


def _read_zip(path: Path) -> dict[str, str]:
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name).decode() for name in zf.namelist()}


class TestPaths:
    """Path and entry naming."""

    def test_minute_zip_path(self, nifty):
        path = build_trade_zip_path(Path("/lean/data"), nifty, Resolution.MINUTE, date(2019, 2, 26))

        assert path == Path("/lean/data/equity/usa/minute/nifty/20190226_trade.zip")

    def test_minute_csv_name(self, nifty):
        name = build_trade_csv_filename(nifty, Resolution.MINUTE, date(2019, 2, 26))

        assert name == "20190226_nifty_minute_trade.csv"

    def test_daily_paths(self, nifty):
        assert build_trade_zip_path(Path("/d"), nifty, Resolution.DAILY) == Path("/d/equity/usa/daily/nifty.zip")
        assert build_trade_csv_filename(nifty, Resolution.DAILY) == "nifty.csv"

    def test_intraday_requires_day(self, nifty):
        with pytest.raises(ValueError, match="requires a trading day"):
            build_trade_zip_path(Path("/d"), nifty, Resolution.SECOND)

    def test_group_by_day_preserves_order(self):
        bars = [
            _bar(datetime(2019, 2, 27, 9, 15)),
            _bar(datetime(2019, 2, 26, 9, 16)),
            _bar(datetime(2019, 2, 26, 9, 15)),
        ]

        days = group_bars_by_day(bars)

        assert list(days) == [date(2019, 2, 27), date(2019, 2, 26)]
        assert [b.time.minute for b in days[date(2019, 2, 26)]] == [16, 15]


class TestLeanDataWriter:
    """Zip archive contents and overwrite semantics."""

    def test_minute_bars_written_per_day(self, tmp_path, nifty):
        bars = [
            _bar(datetime(2019, 2, 26, 9, 15)),
            _bar(datetime(2019, 2, 26, 9, 16), v=250),
            _bar(datetime(2019, 2, 27, 15, 29), o="1.23456", h="2", l="1", c="1.5", v=3),
        ]

        result = LeanDataWriter().write(Resolution.MINUTE, nifty, tmp_path, bars)

        assert result.bar_count == 3
        assert len(result.files_written) == 2

        first = _read_zip(tmp_path / "equity/usa/minute/nifty/20190226_trade.zip")
        assert first == {
            "20190226_nifty_minute_trade.csv":
                "33300000,108000000,108105000,107952500,108057500,0\n"
                "33360000,108000000,108105000,107952500,108057500,250\n"
        }

        second = _read_zip(tmp_path / "equity/usa/minute/nifty/20190227_trade.zip")
        assert second == {"20190227_nifty_minute_trade.csv": "55740000,12345,20000,10000,15000,3\n"}

    def test_daily_bars_written_to_single_archive(self, tmp_path, nifty):
        bars = [_bar(datetime(2019, 2, 26)), _bar(datetime(2019, 2, 27))]

        LeanDataWriter().write(Resolution.DAILY, nifty, tmp_path, bars)

        content = _read_zip(tmp_path / "equity/usa/daily/nifty.zip")["nifty.csv"]
        assert content.splitlines() == [
            "20190226 00:00,108000000,108105000,107952500,108057500,0",
            "20190227 00:00,108000000,108105000,107952500,108057500,0",
        ]

    def test_non_equity_prices_unscaled(self, tmp_path):
        instrument = InstrumentId("NIFTY", SecurityType.INDEX, "india")

        LeanDataWriter().write(Resolution.MINUTE, instrument, tmp_path, [_bar(datetime(2019, 2, 26, 9, 15))])

        content = _read_zip(tmp_path / "index/india/minute/nifty/20190226_trade.zip")
        assert content["20190226_nifty_minute_trade.csv"] == "33300000,10800.00,10810.50,10795.25,10805.75,0\n"

    def test_existing_archive_is_overwritten(self, tmp_path, nifty):
        writer = LeanDataWriter()
        writer.write(Resolution.MINUTE, nifty, tmp_path, [_bar(datetime(2019, 2, 26, 9, 15), v=1)])
        writer.write(Resolution.MINUTE, nifty, tmp_path, [_bar(datetime(2019, 2, 26, 9, 20), v=2)])

        archive_dir = tmp_path / "equity/usa/minute/nifty"
        content = _read_zip(archive_dir / "20190226_trade.zip")

        assert content["20190226_nifty_minute_trade.csv"].splitlines() == [
            "33600000,108000000,108105000,107952500,108057500,2"
        ]
        assert sorted(p.name for p in archive_dir.iterdir()) == ["20190226_trade.zip"]

    def test_empty_batch_writes_nothing(self, tmp_path, nifty):
        result = LeanDataWriter().write(Resolution.MINUTE, nifty, tmp_path, [])

        assert result.bar_count == 0
        assert result.files_written == []
        assert list(tmp_path.iterdir()) == []

    def test_custom_price_scale(self, tmp_path, nifty):
        writer = LeanDataWriter(price_scale=100)

        row = writer.format_row(_bar(datetime(2019, 2, 26, 9, 15)), nifty, Resolution.MINUTE)

        assert row == "33300000,1080000,1081050,1079525,1080575,0"

    @pytest.mark.parametrize("umask,expected", [(0o022, 0o644), (0o027, 0o640), (0o002, 0o664)])
    def test_archive_mode_follows_umask(self, tmp_path, nifty, umask, expected):
        previous = os.umask(umask)
        try:
            result = LeanDataWriter().write(Resolution.MINUTE, nifty, tmp_path, [_bar(datetime(2019, 2, 26, 9, 15))])
        finally:
            os.umask(previous)

        assert stat.S_IMODE(result.files_written[0].stat().st_mode) == expected

    def test_os_error_becomes_persistence_error(self, tmp_path, nifty):
        with patch("nse_converter.storage.lean_writer.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full") as exc_info:
                LeanDataWriter().write(Resolution.MINUTE, nifty, tmp_path, [_bar(datetime(2019, 2, 26, 9, 15))])

        assert exc_info.value.operation == "write_zip"
        leftovers = list((tmp_path / "equity/usa/minute/nifty").iterdir())
        assert leftovers == []
