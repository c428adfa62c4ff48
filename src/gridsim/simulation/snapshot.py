"""
Snapshots - Immutable per-tick views of the race state.

Consumers (reporting, export, rendering) only ever see these records,
never the mutable race state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from gridsim.car.pit_stop import PitStatus
from gridsim.car.tires import TireCompound


@dataclass(frozen=True)
class VehicleSnapshot:
    """State of one vehicle at the end of a tick."""
    vehicle_id: str
    grid_position: int
    position_m: float
    current_lap: int
    status: PitStatus
    pit_timer_remaining_s: Optional[float]
    compound: TireCompound
    tire_age: int
    speed_factor: float
    cumulative_race_time_s: float
    lap_times: Tuple[float, ...]
    pit_stops: int
    finished: bool
    race_progress: float  # Completed laps plus the fraction of the current lap

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicle_id": self.vehicle_id,
            "grid_position": self.grid_position,
            "position_m": self.position_m,
            "current_lap": self.current_lap,
            "status": self.status.value,
            "pit_timer_remaining_s": self.pit_timer_remaining_s,
            "compound": self.compound.value,
            "tire_age": self.tire_age,
            "speed_factor": self.speed_factor,
            "cumulative_race_time_s": self.cumulative_race_time_s,
            "lap_times": list(self.lap_times),
            "pit_stops": self.pit_stops,
            "finished": self.finished,
        }


@dataclass(frozen=True)
class RaceSnapshot:
    """State of the whole race at the end of a tick."""
    tick: int
    elapsed_s: float
    vehicles: Tuple[VehicleSnapshot, ...]

    @property
    def is_finished(self) -> bool:
        return all(v.finished for v in self.vehicles)

    @property
    def leader(self) -> VehicleSnapshot:
        """Vehicle furthest into the race, earliest finisher first."""
        return max(self.vehicles, key=lambda v: (v.race_progress, -v.cumulative_race_time_s))

    def vehicle(self, vehicle_id: str) -> VehicleSnapshot:
        """Get a vehicle snapshot by id.

        Raises:
            KeyError: If no vehicle has this id
        """
        for v in self.vehicles:
            if v.vehicle_id == vehicle_id:
                return v
        raise KeyError(vehicle_id)
