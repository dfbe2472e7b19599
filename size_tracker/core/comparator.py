"""
Size comparison against the recorded history.

Selects the baseline for the headline delta and builds the series that is
rendered as the trend chart.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..storage.models import SizeRecord
from .trend import DEFAULT_SMA_WINDOW, TrendSeries, build_trend_series, sort_records

_IEC_UNITS = ["KiB", "MiB", "GiB", "TiB"]


def format_bytes(n: float) -> str:
    """Format a byte count with binary prefixes (``2.0 MiB``)."""
    sign = "-" if n < 0 else ""
    value = float(abs(n))
    if value < 1024:
        return f"{sign}{int(value)} B"
    for unit in _IEC_UNITS:
        value /= 1024
        if value < 1024 or unit == _IEC_UNITS[-1]:
            return f"{sign}{value:.1f} {unit}"
    raise AssertionError("unreachable")


def _format_percent_change(before: int, after: int) -> str:
    """Format percentage change with sign."""
    if before == 0:
        return "N/A"
    percent = ((after - before) / before) * 100
    return f"{'+' if percent >= 0 else ''}{percent:,.1f}%"


@dataclass(frozen=True)
class Report:
    """Outcome of comparing the current size against the history."""
    current: SizeRecord
    previous: Optional[SizeRecord]
    series: Optional[TrendSeries]
    
    @property
    def has_baseline(self) -> bool:
        return self.previous is not None
    
    @property
    def delta(self) -> Optional[int]:
        """Bytes gained (positive) or lost since the baseline."""
        if self.previous is None:
            return None
        return self.current.size - self.previous.size
    
    def headline(self) -> List[str]:
        """Human-readable summary lines."""
        lines = [f"Binary size: {format_bytes(self.current.size)} ({self.current.size} bytes)"]
        if self.previous is None:
            lines.append("No previous size record to compare against")
            return lines
        
        lines.append(
            f"Previous binary size: {format_bytes(self.previous.size)} "
            f"({self.previous.size} bytes, commit {self.previous.commit[:12]})"
        )
        delta = self.delta
        sign = "+" if delta >= 0 else "-"
        lines.append(
            f"Change: {sign}{format_bytes(abs(delta))} ({sign}{abs(delta)} bytes, "
            f"{_format_percent_change(self.previous.size, self.current.size)})"
        )
        return lines


def compare(
    current: SizeRecord,
    history: Sequence[SizeRecord],
    window: int = DEFAULT_SMA_WINDOW,
) -> Report:
    """Compare the current record against the stored history.
    
    History may arrive in any order. A stored record for the current commit
    is superseded by ``current`` and ignored.
    
    Args:
        current: Record measured in this run
        history: Previously stored records
        window: Moving average window for the trend series
        
    Returns:
        Report; ``has_baseline`` is False and no series is built when there
        is nothing to compare against
    """
    prior = sort_records(r for r in history if r.commit != current.commit)
    if not prior:
        return Report(current=current, previous=None, series=None)
    
    series = build_trend_series(sort_records(prior + [current]), window)
    return Report(current=current, previous=prior[-1], series=series)
