"""
Race viewer - Live 2D rendering of race snapshots with matplotlib.

Provides:
- Track centerline and start/finish marker, drawn once
- One marker per vehicle, moved to its interpolated track coordinates
- Status panel with race lap, elapsed time and per-vehicle state
"""

from typing import List, Sequence
import logging

import matplotlib.pyplot as plt
import numpy as np

from gridsim.car.pit_stop import PitStatus
from gridsim.errors import ConfigurationError
from gridsim.simulation.snapshot import RaceSnapshot
from gridsim.track.track import Track

logger = logging.getLogger(__name__)

MAX_UPDATE_RATE_HZ = 20.0


class RaceViewer:
    """Matplotlib window following a race.

    The viewer only reads snapshots. Redraws are limited to
    ``max_update_rate_hz`` per simulated second; closing the window
    flips ``is_closed`` so the caller can cancel the race.

    Usage:
        viewer = RaceViewer(track, ["DRV1", "DRV2"])
        viewer.show()
        for snapshot in iter_realtime(controller, dt, should_stop=lambda: viewer.is_closed):
            viewer.update(snapshot)
    """

    def __init__(
        self,
        track: Track,
        vehicle_ids: Sequence[str],
        max_update_rate_hz: float = MAX_UPDATE_RATE_HZ,
    ):
        """Initialize viewer and build the figure.

        Args:
            track: Track with geometry attached
            vehicle_ids: Vehicles to draw, in legend order
            max_update_rate_hz: Redraws per simulated second
        """
        if track.geometry is None:
            raise ConfigurationError("The viewer needs a track with geometry")
        if not max_update_rate_hz > 0.0:
            raise ConfigurationError("max_update_rate_hz must be positive")

        self.track = track
        self.vehicle_ids = list(vehicle_ids)
        self._min_interval_s = 1.0 / max_update_rate_hz
        self._last_draw_s = -np.inf
        self._closed = False
        self.redraws = 0

        self.fig, self.ax = plt.subplots(figsize=(10, 8))
        self.fig.canvas.mpl_connect("close_event", self._on_close)
        self._build_scene()

    @property
    def is_closed(self) -> bool:
        """Check if the window has been closed."""
        return self._closed

    def _on_close(self, event) -> None:
        logger.info("Viewer window closed")
        self._closed = True

    def _build_scene(self) -> None:
        ax = self.ax
        xs, ys = self.track.geometry.closed_polyline()
        ax.plot(xs, ys, color="#888888", linewidth=8, alpha=0.3, zorder=1)
        ax.plot(xs, ys, color="#333333", linewidth=2, zorder=2)

        start_x, start_y = self.track.coordinates_at(0.0)
        start_marker = ax.scatter(
            start_x, start_y, s=200, c="green", marker="s", zorder=10, label="Start/Finish"
        )

        colors = plt.cm.tab10(np.linspace(0, 1, max(len(self.vehicle_ids), 1)))
        self._markers = {}
        for vid, color in zip(self.vehicle_ids, colors):
            marker, = ax.plot(
                [], [], "o", markersize=12, color=color,
                markeredgecolor="white", markeredgewidth=2, zorder=20, label=vid,
            )
            self._markers[vid] = marker

        self._info_text = ax.text(
            0.02, 0.98, "", transform=ax.transAxes, fontsize=10,
            verticalalignment="top", fontfamily="monospace",
            bbox=dict(boxstyle="round", facecolor="white", alpha=0.9),
        )

        ax.set_title(f"{self.track.name} - {self.track.lap_count} laps", fontsize=14)
        ax.set_xlabel("x (m)")
        ax.set_ylabel("y (m)")
        ax.set_aspect("equal", adjustable="datalim")
        ax.legend(
            [start_marker] + list(self._markers.values()),
            ["Start/Finish"] + self.vehicle_ids,
            loc="upper right", fontsize=9,
        )
        ax.grid(alpha=0.3)

    def show(self) -> None:
        """Open the window without blocking."""
        plt.ion()
        plt.show(block=False)

    def update(self, snapshot: RaceSnapshot) -> bool:
        """Render a snapshot if the update rate allows it.

        Args:
            snapshot: Latest race snapshot

        Returns:
            True if the window was redrawn
        """
        due = snapshot.elapsed_s - self._last_draw_s >= self._min_interval_s
        if not (due or snapshot.is_finished) or self._closed:
            return False

        self.draw(snapshot)
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()
        self._last_draw_s = snapshot.elapsed_s
        self.redraws += 1
        return True

    def draw(self, snapshot: RaceSnapshot) -> None:
        """Move markers and refresh the status panel."""
        for v in snapshot.vehicles:
            marker = self._markers.get(v.vehicle_id)
            if marker is None:
                continue
            x, y = self.track.coordinates_at(v.position_m)
            marker.set_data([x], [y])
            marker.set_alpha(0.5 if v.status is PitStatus.PITLANE else 1.0)

        self._info_text.set_text("\n".join(self.status_lines(snapshot)))

    def status_lines(self, snapshot: RaceSnapshot) -> List[str]:
        """Text of the status panel."""
        lap_count = self.track.lap_count
        leader = snapshot.leader
        lines = [
            f"Lap:  {min(leader.current_lap, lap_count)}/{lap_count}",
            f"Time: {snapshot.elapsed_s:8.1f}s",
            "",
        ]
        ordered = sorted(
            snapshot.vehicles,
            key=lambda v: (-v.race_progress, v.cumulative_race_time_s),
        )
        for pos, v in enumerate(ordered, start=1):
            if v.finished:
                state = f"finished {v.cumulative_race_time_s:.3f}s"
            elif v.status is PitStatus.PITLANE:
                state = f"pit lane ({v.pit_timer_remaining_s:.1f}s)"
            else:
                state = f"lap {v.current_lap} {v.compound.value}/{v.tire_age}"
            lines.append(f"P{pos} {v.vehicle_id:<6} {state}")
        return lines

    def wait_until_closed(self) -> None:
        """Block until the user closes the window."""
        if self._closed:
            return
        plt.ioff()
        plt.show()

    def close(self) -> None:
        plt.close(self.fig)
        self._closed = True
