"""
Scoring module - Race result tables.

This module contains:
- RaceResult: Lap time and race time tables for every vehicle
- VehicleResult: Timing record of one vehicle
- plot.plot_lap_times: Lap time chart export (imports matplotlib, import it directly)
"""

from gridsim.scoring.results import RaceResult, VehicleResult

__all__ = [
    "RaceResult",
    "VehicleResult",
]
