"""
Pit stop - Per-vehicle OnTrack/Pitlane state machine.

Provides:
- OnTrack / Pitlane: the two immutable motion states of a vehicle
- Symmetric speed ramp shared by pit entry and pit exit
- PitStopStateMachine: lap-boundary pit trigger and per-tick pit progress

A pit stop runs through three phases measured from pit entry:

    entry ramp   [0, R)         speed factor eases from 1 to 0
    standstill   [R, R + S)     vehicle stationary, pit timer counts down
    exit ramp    [R + S, 2R+S)  speed factor eases from 0 to 1

where R is the ramp duration and S the fixed stationary duration.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from gridsim.car.tires import TireModel, TireState
from gridsim.car.vehicle import Strategy

# Tolerance for floating point accumulation of the pit clock
_TIME_EPS = 1e-9


class PitStatus(str, Enum):
    """Observable vehicle status."""

    ON_TRACK = "on_track"
    PITLANE = "pitlane"


@dataclass(frozen=True)
class OnTrack:
    """Vehicle is racing at its theoretical lap-time pace."""

    @property
    def status(self) -> PitStatus:
        return PitStatus.ON_TRACK

    @property
    def pit_timer_remaining_s(self) -> Optional[float]:
        return None


@dataclass(frozen=True)
class Pitlane:
    """Vehicle is in the pit lane.

    The pit timer counts down only while the vehicle is stationary. It
    holds at the full pit duration through the entry ramp and stays at 0
    through the exit ramp, so it does not fall on every Pitlane tick.

    Attributes:
        timer_remaining_s: Stationary service time still to run
        elapsed_s: Time since pit entry
    """
    timer_remaining_s: float
    elapsed_s: float = 0.0

    def __post_init__(self) -> None:
        assert self.timer_remaining_s >= 0.0, "pit timer must not be negative"

    @property
    def status(self) -> PitStatus:
        return PitStatus.PITLANE

    @property
    def pit_timer_remaining_s(self) -> Optional[float]:
        return self.timer_remaining_s


MotionState = Union[OnTrack, Pitlane]

ON_TRACK = OnTrack()


def _smoothstep(u: float) -> float:
    return u * u * (3.0 - 2.0 * u)


def _smoothstep_integral(u: float) -> float:
    # Antiderivative of 3u^2 - 2u^3 with value 0 at u = 0
    return u ** 3 - 0.5 * u ** 4


def ramp_speed_factor(
    t: float,
    duration: float,
    start_factor: float,
    end_factor: float,
) -> float:
    """Speed factor ``t`` seconds into a ramp.

    The ramp eases from ``start_factor`` to ``end_factor`` along a
    smoothstep curve. Swapping the endpoints yields the time-reversed
    profile, so one function serves braking and acceleration.

    Args:
        t: Time since the ramp started
        duration: Ramp duration in seconds
        start_factor: Speed factor at t = 0
        end_factor: Speed factor at t = duration

    Returns:
        Speed factor relative to racing speed
    """
    if duration <= 0.0:
        return end_factor
    u = min(max(t / duration, 0.0), 1.0)
    return start_factor + (end_factor - start_factor) * _smoothstep(u)


def ramp_drive_time(
    t0: float,
    t1: float,
    duration: float,
    start_factor: float,
    end_factor: float,
) -> float:
    """Integral of the ramp speed factor between ``t0`` and ``t1``.

    The result is the time a vehicle at full racing speed would need to
    cover the distance driven on the ramp in that interval. Bounds are
    clipped to the ramp.
    """
    if duration <= 0.0 or t1 <= t0:
        return 0.0

    def antiderivative(t: float) -> float:
        u = min(max(t / duration, 0.0), 1.0)
        return duration * (
            start_factor * u + (end_factor - start_factor) * _smoothstep_integral(u)
        )

    return antiderivative(t1) - antiderivative(t0)


class PitStopStateMachine:
    """Governs OnTrack <-> Pitlane transitions for every vehicle.

    The machine holds no per-vehicle data: each call receives the motion
    state and tire set it acts on and returns the successor state.

    Usage:
        machine = PitStopStateMachine(TireModel())
        state = machine.on_lap_completed(strategy, 12, tires) or state
        state, drive_time = machine.advance(state, dt)
    """

    def __init__(
        self,
        tire_model: TireModel | None = None,
        pit_duration_s: float = 2.5,
        ramp_duration_s: float = 3.0,
    ):
        """Initialize state machine.

        Args:
            tire_model: Tire model performing compound changes
            pit_duration_s: Stationary service duration
            ramp_duration_s: Duration of each of the entry and exit ramps
        """
        self.tire_model = tire_model or TireModel()
        self.pit_duration_s = pit_duration_s
        self.ramp_duration_s = ramp_duration_s

    @property
    def total_duration_s(self) -> float:
        """Time from pit entry until the vehicle is back on track."""
        return 2.0 * self.ramp_duration_s + self.pit_duration_s

    @property
    def time_loss_s(self) -> float:
        """Race time lost to one pit stop compared to racing through."""
        return self.pit_duration_s + self.ramp_duration_s

    def on_lap_completed(
        self,
        strategy: Strategy,
        completed_lap: int,
        tires: TireState,
    ) -> Optional[Pitlane]:
        """Evaluate the pit trigger right after a lap completion.

        If the strategy declares a step for ``completed_lap``, the new
        compound is fitted and the entering Pitlane state is returned.

        Args:
            strategy: Vehicle strategy
            completed_lap: Lap number just completed
            tires: Tire set fitted to the vehicle (changed in place)

        Returns:
            Pitlane state if a pit stop starts, None otherwise
        """
        step = strategy.step_for_lap(completed_lap)
        if step is None:
            return None

        self.tire_model.on_compound_change(tires, step.target_compound)
        return Pitlane(timer_remaining_s=self.pit_duration_s)

    def speed_factor(self, state: MotionState) -> float:
        """Current speed factor relative to racing speed."""
        if isinstance(state, OnTrack):
            return 1.0

        t = state.elapsed_s
        ramp = self.ramp_duration_s
        if t < ramp:
            return ramp_speed_factor(t, ramp, 1.0, 0.0)
        if t < ramp + self.pit_duration_s:
            return 0.0
        return ramp_speed_factor(t - ramp - self.pit_duration_s, ramp, 0.0, 1.0)

    def advance(self, state: MotionState, dt: float) -> Tuple[MotionState, float]:
        """Advance a motion state by one tick.

        Args:
            state: Motion state at the start of the tick
            dt: Tick step size in seconds

        Returns:
            Tuple of (state at the end of the tick, drive time), where the
            drive time is the tick time expressed at full racing speed
        """
        if isinstance(state, OnTrack):
            return state, dt

        start = state.elapsed_s
        end = start + dt
        total = self.total_duration_s

        drive_time = self._drive_time(start, min(end, total))

        if end >= total - _TIME_EPS:
            # Exit ramp done: racing speed for the rest of the tick
            drive_time += max(0.0, end - total)
            return ON_TRACK, drive_time

        standstill_start = self.ramp_duration_s
        standstill_end = standstill_start + self.pit_duration_s
        served = max(0.0, min(end, standstill_end) - max(start, standstill_start))
        remaining = max(0.0, state.timer_remaining_s - served)

        return Pitlane(timer_remaining_s=remaining, elapsed_s=end), drive_time

    def _drive_time(self, start: float, end: float) -> float:
        """Full-speed-equivalent time driven between two pit clock values."""
        ramp = self.ramp_duration_s
        exit_start = ramp + self.pit_duration_s

        entry = ramp_drive_time(start, end, ramp, 1.0, 0.0)
        exit_ = ramp_drive_time(start - exit_start, end - exit_start, ramp, 0.0, 1.0)
        return entry + exit_
