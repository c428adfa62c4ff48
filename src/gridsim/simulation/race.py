"""
Race controller - Fixed-step race loop.

Provides:
- Tick processing: pit state, position update, lap completion, finish check
- Sub-tick line crossing times for lap timing
- Immutable per-tick snapshots for reporting and rendering
"""

from typing import Callable, List, Optional
import logging
import math

from gridsim.car.lap_time import LapTimeModel
from gridsim.car.pit_stop import OnTrack, Pitlane, PitStopStateMachine
from gridsim.car.tires import TireModel
from gridsim.errors import ConfigurationError
from gridsim.simulation.config import RaceConfig
from gridsim.simulation.integrator import PositionIntegrator
from gridsim.simulation.snapshot import RaceSnapshot, VehicleSnapshot
from gridsim.simulation.state import RaceState, VehicleState

logger = logging.getLogger(__name__)


class RaceController:
    """Owns the race state and drives the tick loop.

    Each tick every vehicle still racing is processed in grid order:
    the pit state machine yields the tick's drive time, the integrator
    moves the vehicle, a line crossing completes a lap (tire aging, lap
    timing, pit trigger) and vehicles past the final lap become terminal.

    Usage:
        controller = RaceController(default_race_config())
        snapshots = controller.run(dt=0.1)
        print(snapshots[-1].vehicle("DRV1").lap_times)
    """

    def __init__(self, config: RaceConfig):
        """Initialize controller.

        Args:
            config: Race scenario, validated here

        Raises:
            ConfigurationError: If the scenario is invalid
        """
        config.validate()
        self.config = config

        self.tire_model = TireModel(config.tire_coefficients)
        self.lap_time_model = LapTimeModel(config.base_lap_time_s, self.tire_model)
        self.pit_machine = PitStopStateMachine(
            self.tire_model,
            pit_duration_s=config.pit_duration_s,
            ramp_duration_s=config.pit_ramp_duration_s,
        )
        self.integrator = PositionIntegrator(config.track.length_m)

        self._state = RaceState.from_vehicles(list(config.vehicles))
        self._next_progress_log_s = 1.0

    @property
    def tick_count(self) -> int:
        return self._state.tick

    @property
    def elapsed_s(self) -> float:
        """Simulated race time in seconds."""
        return self._state.elapsed_s

    def reset(self) -> None:
        """Put every vehicle back on the grid."""
        self._state = RaceState.from_vehicles(list(self.config.vehicles))
        self._next_progress_log_s = 1.0

    def is_finished(self) -> bool:
        """Check if every vehicle has completed the race distance."""
        return self._state.all_finished

    def tick(self, dt: float) -> RaceSnapshot:
        """Advance the race by one step.

        Args:
            dt: Step size in seconds

        Returns:
            Snapshot of the race at the end of the step
        """
        _check_step_size(dt)
        tick_start = self._state.elapsed_s

        for vehicle in self._state.vehicles.values():
            if not vehicle.finished:
                self._advance_vehicle(vehicle, tick_start, dt)

        self._state.advance_time(dt)

        if self._state.elapsed_s >= self._next_progress_log_s:
            self._log_progress()
            self._next_progress_log_s = math.floor(self._state.elapsed_s) + 1.0

        return self.snapshot()

    def run(
        self,
        dt: float,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[RaceSnapshot]:
        """Tick until every vehicle has finished.

        Args:
            dt: Step size in seconds
            should_stop: Cancellation check, evaluated between ticks

        Returns:
            One snapshot per tick, in order
        """
        _check_step_size(dt)
        snapshots: List[RaceSnapshot] = []
        while not self.is_finished():
            if should_stop is not None and should_stop():
                logger.info(f"Race cancelled after {self.tick_count} ticks")
                break
            snapshots.append(self.tick(dt))
        return snapshots

    def snapshot(self) -> RaceSnapshot:
        """Immutable view of the current race state."""
        return RaceSnapshot(
            tick=self._state.tick,
            elapsed_s=self._state.elapsed_s,
            vehicles=tuple(self._vehicle_snapshot(v) for v in self._state.vehicles.values()),
        )

    def _advance_vehicle(self, vehicle: VehicleState, tick_start: float, dt: float) -> None:
        lap_time = self.lap_time_model.theoretical_lap_time(vehicle.config, vehicle.tires)

        was_in_pitlane = isinstance(vehicle.motion, Pitlane)
        vehicle.motion, drive_time = self.pit_machine.advance(vehicle.motion, dt)
        if was_in_pitlane and isinstance(vehicle.motion, OnTrack):
            logger.debug(
                f"t={tick_start + dt:.2f}s {vehicle.vehicle_id} leaves the pit lane "
                f"on {vehicle.tires.compound.value} tires"
            )

        fraction = self.integrator.advance(vehicle, drive_time, lap_time)
        if fraction is not None:
            self._complete_lap(vehicle, tick_start + fraction * dt)

        if vehicle.current_lap > self.config.track.lap_count:
            vehicle.finished = True
            logger.debug(
                f"{vehicle.vehicle_id} finished after {vehicle.cumulative_race_time_s:.3f}s"
            )

    def _complete_lap(self, vehicle: VehicleState, crossing_time_s: float) -> None:
        completed_lap = vehicle.current_lap
        lap_time = crossing_time_s - vehicle.cumulative_race_time_s

        vehicle.lap_times = vehicle.lap_times + (lap_time,)
        vehicle.cumulative_race_time_s = crossing_time_s
        vehicle.current_lap += 1

        on_track = isinstance(vehicle.motion, OnTrack)
        if on_track:
            self.tire_model.on_lap_completed(vehicle.tires)

        logger.debug(
            f"t={crossing_time_s:.3f}s {vehicle.vehicle_id} completed lap {completed_lap} "
            f"in {lap_time:.3f}s"
        )

        if not on_track:
            if vehicle.config.strategy.step_for_lap(completed_lap) is not None:
                logger.warning(
                    f"{vehicle.vehicle_id} still in the pit lane after lap {completed_lap}, "
                    f"pit stop skipped"
                )
            return

        pitlane = self.pit_machine.on_lap_completed(
            vehicle.config.strategy, completed_lap, vehicle.tires
        )
        if pitlane is not None:
            vehicle.motion = pitlane
            vehicle.pit_stops += 1
            logger.debug(
                f"{vehicle.vehicle_id} enters the pit lane after lap {completed_lap}, "
                f"fitting {vehicle.tires.compound.value} tires"
            )

    def _vehicle_snapshot(self, vehicle: VehicleState) -> VehicleSnapshot:
        if vehicle.finished:
            progress = float(vehicle.completed_laps)
        else:
            progress = vehicle.completed_laps + vehicle.position_m / self.config.track.length_m

        return VehicleSnapshot(
            vehicle_id=vehicle.vehicle_id,
            grid_position=vehicle.config.grid_position,
            position_m=vehicle.position_m,
            current_lap=vehicle.current_lap,
            status=vehicle.status,
            pit_timer_remaining_s=vehicle.pit_timer_remaining_s,
            compound=vehicle.tires.compound,
            tire_age=vehicle.tires.age,
            speed_factor=self.pit_machine.speed_factor(vehicle.motion),
            cumulative_race_time_s=vehicle.cumulative_race_time_s,
            lap_times=vehicle.lap_times,
            pit_stops=vehicle.pit_stops,
            finished=vehicle.finished,
            race_progress=progress,
        )

    def _log_progress(self) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        parts = [
            f"{v.vehicle_id} lap {min(v.current_lap, self.config.track.lap_count)} "
            f"{v.position_m:.1f}m {v.status.value}"
            for v in self._state.vehicles.values()
        ]
        logger.debug(f"t={self._state.elapsed_s:.1f}s | " + " | ".join(parts))


def _check_step_size(dt: float) -> None:
    if not (math.isfinite(dt) and dt > 0.0):
        raise ConfigurationError(f"Step size must be positive, got {dt}")
