"""
Race state - Mutable per-race bookkeeping owned by the race controller.

Manages:
- Per-vehicle position, lap, motion state and tire set
- Completed lap durations and cumulative race time
- Global tick count and elapsed race time
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from gridsim.car.pit_stop import ON_TRACK, MotionState, PitStatus
from gridsim.car.tires import TireState
from gridsim.car.vehicle import VehicleConfig


@dataclass
class VehicleState:
    """Mutable state of one vehicle.

    Only the race controller and the components it hands this record to
    may change it, and only during a tick.
    """
    config: VehicleConfig
    tires: TireState
    position_m: float = 0.0
    current_lap: int = 1
    motion: MotionState = ON_TRACK
    cumulative_race_time_s: float = 0.0      # Line crossing time of the last completed lap
    lap_times: Tuple[float, ...] = ()        # Replaced, never mutated, so snapshots can share it
    pit_stops: int = 0
    overflow_m: float = 0.0                  # Distance beyond one lap carried to the next tick
    finished: bool = False

    @classmethod
    def from_config(cls, config: VehicleConfig) -> "VehicleState":
        """Create the starting state of a vehicle."""
        return cls(config=config, tires=TireState(compound=config.start_compound))

    @property
    def vehicle_id(self) -> str:
        return self.config.vehicle_id

    @property
    def status(self) -> PitStatus:
        return self.motion.status

    @property
    def pit_timer_remaining_s(self) -> Optional[float]:
        """Remaining stationary time, None while on track."""
        return self.motion.pit_timer_remaining_s

    @property
    def completed_laps(self) -> int:
        return len(self.lap_times)


@dataclass
class RaceState:
    """State container for one race.

    Vehicles are kept in starting grid order.
    """
    vehicles: Dict[str, VehicleState] = field(default_factory=dict)
    tick: int = 0
    elapsed_s: float = 0.0

    @classmethod
    def from_vehicles(cls, configs: List[VehicleConfig]) -> "RaceState":
        """Create the initial race state from vehicle configurations.

        Args:
            configs: Vehicle configurations in any order

        Returns:
            Race state with vehicles ordered by grid position
        """
        ordered = sorted(configs, key=lambda c: c.grid_position)
        return cls(vehicles={c.vehicle_id: VehicleState.from_config(c) for c in ordered})

    @property
    def all_finished(self) -> bool:
        return all(v.finished for v in self.vehicles.values())

    def advance_time(self, dt: float) -> None:
        """Advance race time by one tick.

        Args:
            dt: Time step in seconds
        """
        self.elapsed_s += dt
        self.tick += 1
