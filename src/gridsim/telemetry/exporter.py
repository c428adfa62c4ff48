"""
Race exporter - Export race snapshots and results to files.

Provides:
- CSV export: one row per vehicle per tick
- JSON export: race configuration and result tables
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional
import csv
import json
import logging

import numpy as np

from gridsim.scoring.results import RaceResult
from gridsim.simulation.config import RaceConfig
from gridsim.simulation.snapshot import RaceSnapshot

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "tick",
    "time_s",
    "vehicle_id",
    "lap",
    "position_m",
    "status",
    "pit_timer_s",
    "compound",
    "tire_age",
    "speed_factor",
]


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@dataclass
class ExporterConfig:
    """Exporter configuration."""
    output_dir: str = "./race_data"
    include_config: bool = True
    every_nth_tick: int = 1   # Thin out the per-tick CSV


class RaceExporter:
    """Export race data for analysis in external tools.

    Usage:
        exporter = RaceExporter(ExporterConfig(output_dir="out"))
        exporter.export_csv(snapshots)
        exporter.export_json(result, config)
    """

    def __init__(self, config: ExporterConfig | None = None):
        """Initialize exporter.

        Args:
            config: Exporter configuration
        """
        self.config = config or ExporterConfig()
        if self.config.every_nth_tick < 1:
            raise ValueError("every_nth_tick must be at least 1")

        self._output_path = Path(self.config.output_dir)
        self._output_path.mkdir(parents=True, exist_ok=True)

    @property
    def output_path(self) -> Path:
        return self._output_path

    def export_csv(
        self,
        snapshots: Iterable[RaceSnapshot],
        filename: str = "race_ticks.csv",
    ) -> Path:
        """Export per-tick vehicle states to a CSV file.

        Args:
            snapshots: Race snapshots in tick order
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename
        rows = 0

        with open(output_file, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS)

            for snapshot in snapshots:
                if snapshot.tick % self.config.every_nth_tick:
                    continue
                for v in snapshot.vehicles:
                    timer = v.pit_timer_remaining_s
                    writer.writerow([
                        snapshot.tick,
                        f"{snapshot.elapsed_s:.4f}",
                        v.vehicle_id,
                        v.current_lap,
                        f"{v.position_m:.3f}",
                        v.status.value,
                        "" if timer is None else f"{timer:.3f}",
                        v.compound.value,
                        v.tire_age,
                        f"{v.speed_factor:.4f}",
                    ])
                    rows += 1

        logger.debug(f"Wrote {rows} telemetry rows to {output_file}")
        return output_file

    def export_json(
        self,
        result: RaceResult,
        race_config: Optional[RaceConfig] = None,
        filename: str = "race_result.json",
    ) -> Path:
        """Export the race result to a JSON file.

        Args:
            result: Race result tables
            race_config: Scenario to store alongside the result
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename

        data: Dict[str, Any] = {"result": result.to_dict()}
        if self.config.include_config and race_config is not None:
            data["config"] = race_config.to_dict()

        with open(output_file, "w") as f:
            json.dump(data, f, indent=2, cls=NumpyEncoder)

        return output_file

    def export_lap_summary(
        self,
        result: RaceResult,
        filename: str = "lap_summary.json",
    ) -> Path:
        """Export per-vehicle lap time statistics.

        Args:
            result: Race result tables
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename

        summary = {}
        for v in result.vehicles:
            times = np.asarray(v.lap_times, dtype=float)
            if len(times) == 0:
                summary[v.vehicle_id] = {"laps": 0}
                continue
            summary[v.vehicle_id] = {
                "laps": len(times),
                "min": times.min(),
                "max": times.max(),
                "mean": times.mean(),
                "total": times.sum(),
            }

        with open(output_file, "w") as f:
            json.dump({"vehicles": summary}, f, indent=2, cls=NumpyEncoder)

        return output_file
