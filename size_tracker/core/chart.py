"""
Trend chart rendering.

Draws the raw size history and its moving average to a PNG file.
"""

import logging
from pathlib import Path
from typing import Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

from ..errors import RenderError
from .comparator import format_bytes
from .trend import TrendSeries

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_PATH = "graph.png"


def _size_tick(value: float, _pos) -> str:
    size = int(value)
    return f"{format_bytes(size)} ({size} B)"


def render_trend_chart(series: TrendSeries, output_path: Union[str, Path] = DEFAULT_GRAPH_PATH) -> Path:
    """Render the size trend chart.
    
    Args:
        series: Chronological size history including the current build
        output_path: PNG file to write
        
    Returns:
        Path of the written chart
        
    Raises:
        RenderError: If the chart cannot be drawn or written
    """
    if len(series) == 0:
        raise RenderError("cannot render an empty size series")
    
    output_path = Path(output_path)
    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        ax.plot(series.timestamps, series.sizes, marker="o", label="Binary Sizes")
        ax.plot(
            series.timestamps,
            series.sma,
            color="red",
            linestyle=(0, (5, 5)),
            label=f"Binary Sizes - SMA ({series.window})",
        )
        
        ax.set_xlabel("Commit Time")
        ax.set_ylabel("Binary Size")
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d"))
        ax.yaxis.set_major_formatter(FuncFormatter(_size_tick))
        ax.grid(True, alpha=0.3)
        ax.legend()
        fig.autofmt_xdate()
        fig.tight_layout()
        
        fig.savefig(output_path, dpi=150)
    except (OSError, ValueError) as e:
        raise RenderError(f"rendering graph to {output_path}: {e}") from e
    finally:
        plt.close(fig)
    
    logger.info("Wrote size trend chart to %s", output_path)
    return output_path
