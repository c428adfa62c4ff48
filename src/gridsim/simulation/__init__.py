"""
Simulation module - Fixed-step race loop.

This module contains:
- RaceConfig / SimOptions: Immutable scenario and run options
- RaceState / VehicleState: Mutable race bookkeeping
- PositionIntegrator: Per-tick distance update and line crossing
- RaceController: Tick loop, lap completion and snapshots
- iter_realtime: Wall-clock pacing for interactive runs
"""

from gridsim.simulation.config import (
    RaceConfig,
    SimOptions,
    default_race_config,
    load_race_config,
    race_config_from_dict,
)
from gridsim.simulation.state import RaceState, VehicleState
from gridsim.simulation.snapshot import RaceSnapshot, VehicleSnapshot
from gridsim.simulation.integrator import PositionIntegrator
from gridsim.simulation.race import RaceController
from gridsim.simulation.pacing import iter_realtime

__all__ = [
    "RaceConfig",
    "SimOptions",
    "default_race_config",
    "load_race_config",
    "race_config_from_dict",
    "RaceState",
    "VehicleState",
    "RaceSnapshot",
    "VehicleSnapshot",
    "PositionIntegrator",
    "RaceController",
    "iter_realtime",
]
