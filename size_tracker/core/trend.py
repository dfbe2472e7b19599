"""
Trend series and smoothing.

The moving average only visualizes noise in the size history; it never
affects the outcome of a run.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Sequence

from ..storage.models import SizeRecord

DEFAULT_SMA_WINDOW = 16


@dataclass(frozen=True)
class TrendPoint:
    """One point of the size history."""
    timestamp: datetime
    size: int
    commit: str


@dataclass(frozen=True)
class TrendSeries:
    """Chronological size history with its moving average."""
    points: List[TrendPoint]
    sma: List[float]
    window: int
    
    def __len__(self) -> int:
        return len(self.points)
    
    @property
    def timestamps(self) -> List[datetime]:
        return [p.timestamp for p in self.points]
    
    @property
    def sizes(self) -> List[int]:
        return [p.size for p in self.points]


def simple_moving_average(values: Sequence[float], window: int) -> List[float]:
    """Trailing mean over the last ``min(window, i + 1)`` values.
    
    Raises:
        ValueError: If window is less than 1
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    
    averages = []
    total = 0.0
    for i, value in enumerate(values):
        total += value
        if i >= window:
            total -= values[i - window]
        averages.append(total / min(window, i + 1))
    return averages


def sort_records(records: Iterable[SizeRecord]) -> List[SizeRecord]:
    """Chronological order, commit id breaking timestamp ties."""
    return sorted(records, key=lambda r: (r.timestamp, r.commit))


def build_trend_series(records: Sequence[SizeRecord], window: int = DEFAULT_SMA_WINDOW) -> TrendSeries:
    """Build the trend series for records already in display order."""
    points = [TrendPoint(timestamp=r.timestamp, size=r.size, commit=r.commit) for r in records]
    sma = simple_moving_average([float(p.size) for p in points], window)
    return TrendSeries(points=points, sma=sma, window=window)
