"""
Race result - Lap time and race time tables.

Provides:
- Per-vehicle lap durations and cumulative race times, one entry per lap
- Finishing order
- Console/text rendering of both tables and a results file writer
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np

from gridsim.simulation.snapshot import RaceSnapshot

_MISSING = "-"


@dataclass(frozen=True)
class VehicleResult:
    """Timing record of one vehicle."""
    vehicle_id: str
    grid_position: int
    lap_times: Tuple[float, ...]
    pit_stops: int
    finished: bool

    @property
    def race_times(self) -> Tuple[float, ...]:
        """Cumulative race time at the end of each completed lap."""
        return tuple(float(t) for t in np.cumsum(self.lap_times))

    @property
    def completed_laps(self) -> int:
        return len(self.lap_times)

    @property
    def total_time_s(self) -> float:
        return float(np.sum(self.lap_times)) if self.lap_times else 0.0

    @property
    def best_lap_time_s(self) -> float | None:
        return min(self.lap_times) if self.lap_times else None


@dataclass(frozen=True)
class RaceResult:
    """Outcome of a race, built from its last snapshot.

    Usage:
        result = RaceResult.from_snapshot(snapshots[-1], lap_count=30)
        print(result.format_tables())
    """
    lap_count: int
    vehicles: Tuple[VehicleResult, ...]
    elapsed_s: float

    @classmethod
    def from_snapshot(
        cls,
        snapshot: RaceSnapshot,
        lap_count: int | None = None,
    ) -> "RaceResult":
        """Collect lap times of every vehicle from a race snapshot.

        Args:
            snapshot: Final (or latest) race snapshot
            lap_count: Race distance in laps. Defaults to the most laps
                completed by any vehicle.

        Returns:
            Race result in starting grid order
        """
        vehicles = tuple(
            VehicleResult(
                vehicle_id=v.vehicle_id,
                grid_position=v.grid_position,
                lap_times=v.lap_times,
                pit_stops=v.pit_stops,
                finished=v.finished,
            )
            for v in sorted(snapshot.vehicles, key=lambda v: v.grid_position)
        )
        if lap_count is None:
            lap_count = max((v.completed_laps for v in vehicles), default=0)
        return cls(lap_count=lap_count, vehicles=vehicles, elapsed_s=snapshot.elapsed_s)

    @property
    def is_complete(self) -> bool:
        return all(v.finished for v in self.vehicles)

    def vehicle(self, vehicle_id: str) -> VehicleResult:
        """Get the result of one vehicle.

        Raises:
            KeyError: If no vehicle has this id
        """
        for v in self.vehicles:
            if v.vehicle_id == vehicle_id:
                return v
        raise KeyError(vehicle_id)

    def finishing_order(self) -> List[VehicleResult]:
        """Vehicles ordered by laps completed, then by race time."""
        return sorted(self.vehicles, key=lambda v: (-v.completed_laps, v.total_time_s))

    def format_tables(self) -> str:
        """Render the lap time and race time tables.

        Returns:
            Text with a "RESULT: Lap times" and a "RESULT: Race times"
            section, one row per lap and one column per vehicle
        """
        header = "lap, " + ", ".join(
            f"{v.grid_position:3d} ({v.vehicle_id})" for v in self.vehicles
        )
        lap_rows = self._rows([v.lap_times for v in self.vehicles])
        race_rows = self._rows([v.race_times for v in self.vehicles])

        lines = ["RESULT: Lap times", header, *lap_rows, "", "RESULT: Race times", header, *race_rows]
        return "\n".join(lines) + "\n"

    def _rows(self, columns: List[Tuple[float, ...]]) -> List[str]:
        rows = []
        for lap in range(1, self.lap_count + 1):
            cells = [
                f"{col[lap - 1]:8.3f}s" if lap <= len(col) else f"{_MISSING:>9}"
                for col in columns
            ]
            rows.append(f"{lap:3d}, " + ", ".join(cells))
        return rows

    def write(self, path: str | Path) -> Path:
        """Write both tables to a text file.

        Args:
            path: Output file path, parent directories are created

        Returns:
            Path to the written file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.format_tables())
        return path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lap_count": self.lap_count,
            "elapsed_s": self.elapsed_s,
            "complete": self.is_complete,
            "vehicles": [
                {
                    "vehicle_id": v.vehicle_id,
                    "grid_position": v.grid_position,
                    "finished": v.finished,
                    "pit_stops": v.pit_stops,
                    "lap_times": list(v.lap_times),
                    "race_times": list(v.race_times),
                    "best_lap_time_s": v.best_lap_time_s,
                }
                for v in self.vehicles
            ],
            "finishing_order": [v.vehicle_id for v in self.finishing_order()],
        }
