"""
Vehicle configuration - Per-vehicle race parameters.

Contains:
- StrategyStep / Strategy: pre-declared tire changes keyed by lap
- VehicleConfig: immutable vehicle and driver parameters
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from gridsim.car.tires import TireCompound
from gridsim.errors import ConfigurationError


@dataclass(frozen=True)
class StrategyStep:
    """Pit for ``target_compound`` right after completing ``trigger_lap``."""
    trigger_lap: int
    target_compound: TireCompound


@dataclass(frozen=True)
class Strategy:
    """Ordered, immutable sequence of strategy steps.

    Trigger laps must be positive and strictly increasing.
    """
    steps: Tuple[StrategyStep, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of steps but always store a tuple
        object.__setattr__(self, "steps", tuple(self.steps))
        previous = 0
        for step in self.steps:
            if not isinstance(step.trigger_lap, int) or step.trigger_lap < 1:
                raise ConfigurationError(
                    f"Strategy trigger lap must be a positive integer, got {step.trigger_lap!r}"
                )
            if step.trigger_lap <= previous:
                raise ConfigurationError(
                    "Strategy trigger laps must be strictly increasing "
                    f"(lap {step.trigger_lap} follows lap {previous})"
                )
            previous = step.trigger_lap

    def __iter__(self) -> Iterator[StrategyStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def step_for_lap(self, lap: int) -> Optional[StrategyStep]:
        """Get the step triggered by completing ``lap``, if any."""
        for step in self.steps:
            if step.trigger_lap == lap:
                return step
        return None

    @property
    def compounds(self) -> Tuple[TireCompound, ...]:
        """Compounds fitted by the pit stops, in order."""
        return tuple(step.target_compound for step in self.steps)


@dataclass(frozen=True)
class VehicleConfig:
    """Vehicle and driver parameters, fixed for the whole race."""
    vehicle_id: str
    base_penalty_s: float = 0.0      # Vehicle time loss per lap
    driver_penalty_s: float = 0.0    # Driver time loss per lap
    grid_position: int = 1           # 1 = pole
    strategy: Strategy = field(default_factory=Strategy)
    start_compound: TireCompound = TireCompound.MEDIUM

    @property
    def stint_compounds(self) -> Tuple[TireCompound, ...]:
        """Every compound the vehicle runs, starting set first."""
        return (self.start_compound,) + self.strategy.compounds
