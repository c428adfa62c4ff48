"""
GridSim - A time-discrete race simulator.

This package advances a small field of vehicles around a closed track in
fixed time steps:
- Lap times composed from vehicle, driver and tire degradation penalties
- Pre-declared pit stop strategies triggered at lap boundaries
- Ramped pit lane speed profile with a stationary service interval
- Lap and race time tables, telemetry export and a live matplotlib viewer
"""

__version__ = "0.1.0"

from gridsim.errors import ConfigurationError, GridSimError, TrackLoadError
from gridsim.simulation.config import RaceConfig, default_race_config, load_race_config
from gridsim.simulation.race import RaceController
from gridsim.track.track import Track

__all__ = [
    "ConfigurationError",
    "GridSimError",
    "TrackLoadError",
    "RaceConfig",
    "RaceController",
    "Track",
    "default_race_config",
    "load_race_config",
    "__version__",
]
