"""
Unit tests for size comparison, smoothing and chart rendering.
"""

import random

import pytest

from conftest import make_record
from size_tracker.core.chart import render_trend_chart
from size_tracker.core.comparator import compare, format_bytes
from size_tracker.core.trend import build_trend_series, simple_moving_average, sort_records
from size_tracker.errors import RenderError


class TestFormatBytes:
    """Test binary-prefix size formatting."""
    
    @pytest.mark.parametrize("size, expected", [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KiB"),
        (1536, "1.5 KiB"),
        (1048576, "1.0 MiB"),
        (2097152, "2.0 MiB"),
        (3 * 1024**3, "3.0 GiB"),
        (5 * 1024**4, "5.0 TiB"),
        (-2048, "-2.0 KiB"),
    ])
    def test_format(self, size, expected):
        assert format_bytes(size) == expected


class TestSimpleMovingAverage:
    """Test trailing moving average."""
    
    def test_window_of_two(self):
        """Verify the trailing mean over a full window."""
        assert simple_moving_average([1, 2, 3, 4], 2) == [1.0, 1.5, 2.5, 3.5]
    
    def test_warm_up_uses_available_values(self):
        """Verify early points average over what is available."""
        assert simple_moving_average([10, 20, 30], 16) == [10.0, 15.0, 20.0]
    
    def test_window_of_one_is_identity(self):
        assert simple_moving_average([5, 7, 9], 1) == [5.0, 7.0, 9.0]
    
    def test_empty(self):
        assert simple_moving_average([], 3) == []
    
    def test_invalid_window(self):
        with pytest.raises(ValueError):
            simple_moving_average([1, 2], 0)


class TestCompare:
    """Test baseline selection and series construction."""
    
    def test_empty_history_has_no_baseline(self):
        """Verify nothing is compared without history."""
        report = compare(make_record("cur", 100, hours=5), [])
        assert not report.has_baseline
        assert report.previous is None
        assert report.series is None
        assert report.delta is None
    
    def test_history_for_same_commit_is_superseded(self):
        """Verify a stored record for the current commit is not a baseline."""
        report = compare(make_record("cur", 100, hours=5), [make_record("cur", 90, hours=5)])
        assert not report.has_baseline
    
    def test_previous_is_latest_by_timestamp(self):
        """Verify the baseline is chosen by commit time, not store order."""
        history = [
            make_record("b", 200, hours=2),
            make_record("c", 300, hours=3),
            make_record("a", 100, hours=1),
        ]
        report = compare(make_record("cur", 400, hours=4), history)
        assert report.previous.commit == "c"
        assert report.delta == 100
    
    def test_series_is_chronological_and_includes_current(self):
        """Verify the chart series has every record once, in time order."""
        history = [make_record(f"c{i}", 1000 + i, hours=i) for i in range(10)]
        random.Random(7).shuffle(history)
        current = make_record("cur", 5000, hours=20)
        
        report = compare(current, history, window=3)
        
        assert len(report.series) == len(history) + 1
        timestamps = report.series.timestamps
        assert timestamps == sorted(timestamps)
        assert report.series.points[-1].commit == "cur"
        assert report.series.window == 3
        assert len(report.series.sma) == len(report.series)
    
    def test_scenario_pull_request_against_one_baseline(self):
        """Verify the headline for a 1 MiB baseline and a 2 MiB build."""
        report = compare(make_record("def456", 2097152, hours=2), [make_record("abc123", 1048576, hours=1)])
        
        assert report.has_baseline
        assert len(report.series) == 2
        headline = "\n".join(report.headline())
        assert "Binary size: 2.0 MiB (2097152 bytes)" in headline
        assert "Previous binary size: 1.0 MiB (1048576 bytes" in headline
        assert "Change: +1.0 MiB (+1048576 bytes, +100.0%)" in headline
    
    def test_headline_for_shrinking_binary(self):
        """Verify size decreases are reported with a minus sign."""
        report = compare(make_record("new", 1024, hours=2), [make_record("old", 2048, hours=1)])
        assert report.headline()[-1] == "Change: -1.0 KiB (-1024 bytes, -50.0%)"
    
    def test_headline_without_baseline(self):
        report = compare(make_record("cur", 10, hours=1), [])
        assert report.headline() == [
            "Binary size: 10 B (10 bytes)",
            "No previous size record to compare against",
        ]
    
    def test_zero_size_baseline(self):
        """Verify a zero-byte baseline does not divide by zero."""
        report = compare(make_record("new", 10, hours=2), [make_record("old", 0, hours=1)])
        assert "N/A" in report.headline()[-1]


class TestTrendSeries:
    """Test series construction."""
    
    def test_sort_breaks_ties_by_commit(self):
        records = [make_record("b", 1), make_record("a", 2)]
        assert [r.commit for r in sort_records(records)] == ["a", "b"]
    
    def test_series_sizes_and_sma(self):
        series = build_trend_series([make_record("a", 10, 0), make_record("b", 20, 1)], window=2)
        assert series.sizes == [10, 20]
        assert series.sma == [10.0, 15.0]


class TestChartRendering:
    """Test PNG output of the trend chart."""
    
    def test_renders_png(self, tmp_path):
        """Verify a PNG file is written."""
        report = compare(make_record("cur", 2097152, hours=3), [
            make_record("a", 1048576, hours=1),
            make_record("b", 1572864, hours=2),
        ])
        output = render_trend_chart(report.series, tmp_path / "graph.png")
        
        assert output == tmp_path / "graph.png"
        assert output.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    
    def test_unwritable_path_raises_render_error(self, tmp_path):
        """Verify I/O failures surface as RenderError."""
        report = compare(make_record("cur", 2, hours=2), [make_record("a", 1, hours=1)])
        with pytest.raises(RenderError):
            render_trend_chart(report.series, tmp_path / "missing" / "graph.png")
    
    def test_empty_series_raises_render_error(self, tmp_path):
        with pytest.raises(RenderError):
            render_trend_chart(build_trend_series([]), tmp_path / "graph.png")
