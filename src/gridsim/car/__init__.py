"""
Car module - Vehicle-level race models.

This module contains:
- Tires: Compound table, degradation penalty, tire age bookkeeping
- LapTimeModel: Theoretical lap time from vehicle, driver and tire penalties
- Vehicle: Immutable vehicle configuration and pit strategy
- PitStopStateMachine: OnTrack/Pitlane transitions and pit speed profile
"""

from gridsim.car.tires import (
    CompoundCoefficients,
    DEFAULT_COEFFICIENTS,
    TireCompound,
    TireModel,
    TireState,
)
from gridsim.car.vehicle import Strategy, StrategyStep, VehicleConfig
from gridsim.car.lap_time import LapTimeModel
from gridsim.car.pit_stop import (
    MotionState,
    OnTrack,
    Pitlane,
    PitStatus,
    PitStopStateMachine,
    ramp_speed_factor,
)

__all__ = [
    "CompoundCoefficients",
    "DEFAULT_COEFFICIENTS",
    "TireCompound",
    "TireModel",
    "TireState",
    "Strategy",
    "StrategyStep",
    "VehicleConfig",
    "LapTimeModel",
    "MotionState",
    "OnTrack",
    "Pitlane",
    "PitStatus",
    "PitStopStateMachine",
    "ramp_speed_factor",
]
