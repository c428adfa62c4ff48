"""
Result plot - Lap time chart of a race.

Provides:
- One line per vehicle over the lap number, as lap time or average lap speed
- PNG export of the chart
"""

from pathlib import Path
from typing import Sequence
import logging

import matplotlib.pyplot as plt
import numpy as np

from gridsim.scoring.results import RaceResult

logger = logging.getLogger(__name__)


def lap_values(
    lap_times: Sequence[float],
    track_length_m: float | None = None,
) -> np.ndarray:
    """Convert lap times to plotted values.

    Args:
        lap_times: Lap durations in seconds
        track_length_m: If given, convert to average lap speed in km/h

    Returns:
        Lap times in seconds, or speeds in km/h
    """
    times = np.asarray(lap_times, dtype=float)
    if track_length_m is None:
        return times
    return track_length_m / times * 3.6


def plot_lap_times(
    result: RaceResult,
    path: str | Path,
    track_length_m: float | None = None,
    title: str | None = None,
) -> Path:
    """Write a lap time chart to an image file.

    Args:
        result: Race result tables
        path: Output image path, parent directories are created
        track_length_m: Plot average lap speed instead of lap time
        title: Chart title

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    show_speed = track_length_m is not None

    fig, ax = plt.subplots(figsize=(12.8, 7.2))
    colors = plt.cm.tab10(np.linspace(0, 1, max(len(result.vehicles), 1)))

    all_values = []
    for v, color in zip(result.vehicles, colors):
        if not v.lap_times:
            continue
        values = lap_values(v.lap_times, track_length_m)
        laps = np.arange(1, len(values) + 1)
        ax.plot(laps, values, marker="o", markersize=3, linewidth=1.5,
                color=color, label=f"{v.grid_position} ({v.vehicle_id})")
        all_values.append(values)

    if all_values:
        values = np.concatenate(all_values)
        low, high = float(values.min()), float(values.max())
    else:
        low, high = 0.0, 1.0
    # 5% margin, with a floor for flat lines
    margin = max((high - low) * 0.05, 0.1)
    ax.set_ylim(low - margin, high + margin)
    ax.set_xlim(0.5, max(result.lap_count, 1) + 0.5)

    ax.set_xlabel("Lap")
    ax.set_ylabel("Average speed (km/h)" if show_speed else "Lap time (s)")
    ax.set_title(title or ("Average lap speed" if show_speed else "Lap times"))
    if all_values:
        ax.legend(loc="upper right", fontsize=9)
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=100)
    plt.close(fig)

    logger.debug(f"Wrote lap time chart to {path}")
    return path
