"""
Race configuration - Immutable scenario and run options.

Provides:
- RaceConfig: track, vehicles, tire table and pit constants of one race
- SimOptions: command-line run options
- The built-in two-vehicle scenario and a JSON parameter file loader
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
import json
import logging
import math

from gridsim.car.lap_time import LapTimeModel
from gridsim.car.tires import (
    DEFAULT_COEFFICIENTS,
    CompoundCoefficients,
    TireCompound,
    TireModel,
    TireState,
)
from gridsim.car.vehicle import Strategy, StrategyStep, VehicleConfig
from gridsim.errors import ConfigurationError
from gridsim.track.track import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceConfig:
    """Complete race scenario, built once at start-up."""
    track: Track
    base_lap_time_s: float
    vehicles: Tuple[VehicleConfig, ...]
    tire_coefficients: Mapping[TireCompound, CompoundCoefficients] = field(
        default_factory=lambda: DEFAULT_COEFFICIENTS
    )
    pit_duration_s: float = 2.5        # Stationary service time
    pit_ramp_duration_s: float = 3.0   # Each of the entry and exit ramps

    def __post_init__(self) -> None:
        object.__setattr__(self, "vehicles", tuple(self.vehicles))
        object.__setattr__(
            self, "tire_coefficients", MappingProxyType(dict(self.tire_coefficients))
        )

    def validate(self) -> None:
        """Check the scenario before a race starts.

        Raises:
            ConfigurationError: If any parameter would make the race invalid
        """
        self.track.validate()

        if not (math.isfinite(self.base_lap_time_s) and self.base_lap_time_s > 0.0):
            raise ConfigurationError(
                f"Base lap time must be positive, got {self.base_lap_time_s}"
            )
        if not (math.isfinite(self.pit_duration_s) and self.pit_duration_s >= 0.0):
            raise ConfigurationError(
                f"Pit duration must be a finite non-negative number, got {self.pit_duration_s}"
            )
        if not (math.isfinite(self.pit_ramp_duration_s) and self.pit_ramp_duration_s >= 0.0):
            raise ConfigurationError(
                "Pit ramp duration must be a finite non-negative number, "
                f"got {self.pit_ramp_duration_s}"
            )
        if not self.vehicles:
            raise ConfigurationError("At least one vehicle is required")

        for compound, coeffs in self.tire_coefficients.items():
            if not (math.isfinite(coeffs.k0) and math.isfinite(coeffs.k1)):
                raise ConfigurationError(
                    f"Degradation coefficients of {compound.value} must be finite"
                )

        for vehicle in self.vehicles:
            if not (math.isfinite(vehicle.base_penalty_s) and math.isfinite(vehicle.driver_penalty_s)):
                raise ConfigurationError(
                    f"Penalties of vehicle {vehicle.vehicle_id} must be finite, got "
                    f"{vehicle.base_penalty_s} and {vehicle.driver_penalty_s}"
                )

        ids = [v.vehicle_id for v in self.vehicles]
        if any(not vid for vid in ids):
            raise ConfigurationError("Vehicle ids must not be empty")
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Vehicle ids must be unique, got {ids}")

        grid = [v.grid_position for v in self.vehicles]
        if any(not isinstance(p, int) or p < 1 for p in grid):
            raise ConfigurationError(f"Grid positions must be positive integers, got {grid}")
        if len(set(grid)) != len(grid):
            raise ConfigurationError(f"Grid positions must be unique, got {grid}")

        lap_model = LapTimeModel(self.base_lap_time_s, TireModel(self.tire_coefficients))
        for vehicle in self.vehicles:
            # Linear in age, so both ends of the reachable range bound every lap
            for compound in vehicle.stint_compounds:
                for age in (0, self.track.lap_count):
                    lap_time = lap_model.theoretical_lap_time(vehicle, TireState(compound, age))
                    if not lap_time > 0.0:
                        raise ConfigurationError(
                            f"Vehicle {vehicle.vehicle_id} has non-positive lap time "
                            f"{lap_time:.3f}s on {compound.value} tires at age {age}"
                        )

    def vehicle(self, vehicle_id: str) -> VehicleConfig:
        """Get a vehicle configuration by id."""
        for v in self.vehicles:
            if v.vehicle_id == vehicle_id:
                return v
        raise KeyError(vehicle_id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the parameter file structure."""
        return {
            "track": {
                "name": self.track.name,
                "length_m": self.track.length_m,
                "lap_count": self.track.lap_count,
            },
            "base_lap_time_s": self.base_lap_time_s,
            "pit_duration_s": self.pit_duration_s,
            "pit_ramp_duration_s": self.pit_ramp_duration_s,
            "tire_coefficients": {
                compound.value: {"k0": c.k0, "k1": c.k1}
                for compound, c in self.tire_coefficients.items()
            },
            "vehicles": [
                {
                    "id": v.vehicle_id,
                    "base_penalty_s": v.base_penalty_s,
                    "driver_penalty_s": v.driver_penalty_s,
                    "grid_position": v.grid_position,
                    "start_compound": v.start_compound.value,
                    "strategy": [
                        {"lap": s.trigger_lap, "compound": s.target_compound.value}
                        for s in v.strategy
                    ],
                }
                for v in self.vehicles
            ],
        }


@dataclass(frozen=True)
class SimOptions:
    """Run options collected from the command line."""
    gui: bool = False
    debug: bool = False
    timestep_size: float = 0.1       # Tick step size (s)
    realtime_factor: float = 1.0     # Simulated seconds per wall-clock second, GUI only
    track_file: Optional[Path] = None
    parfile: Optional[Path] = None
    results_file: Optional[Path] = None
    export_dir: Optional[Path] = None
    plot_file: Optional[Path] = None

    def validate(self) -> None:
        """Check option values.

        Raises:
            ConfigurationError: If the step size or realtime factor is not positive
        """
        if not (math.isfinite(self.timestep_size) and self.timestep_size > 0.0):
            raise ConfigurationError(
                f"Timestep size must be positive, got {self.timestep_size}"
            )
        if not (math.isfinite(self.realtime_factor) and self.realtime_factor > 0.0):
            raise ConfigurationError(
                f"Realtime factor must be positive, got {self.realtime_factor}"
            )


def default_race_config() -> RaceConfig:
    """Built-in two-vehicle scenario."""
    return RaceConfig(
        track=Track(length_m=5554.0, lap_count=30, name="Default Circuit"),
        base_lap_time_s=95.0,
        vehicles=(
            VehicleConfig(
                vehicle_id="DRV1",
                base_penalty_s=0.1,
                grid_position=1,
                start_compound=TireCompound.MEDIUM,
                strategy=Strategy((StrategyStep(15, TireCompound.HARD),)),
            ),
            VehicleConfig(
                vehicle_id="DRV2",
                base_penalty_s=0.3,
                driver_penalty_s=-0.1,
                grid_position=2,
                start_compound=TireCompound.SOFT,
                strategy=Strategy((StrategyStep(12, TireCompound.MEDIUM),)),
            ),
        ),
    )


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ConfigurationError(f"Missing field '{key}' in {where}")
    return data[key]


def _number(value: Any, name: str) -> float:
    # bool is an int subclass but never a valid quantity here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"Field '{name}' must be a number, got {value!r}")
    return float(value)


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Field '{name}' must be an integer, got {value!r}")
    return value


def _parse_vehicle(data: Any, index: int) -> VehicleConfig:
    where = f"vehicle #{index + 1}"
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be an object")

    strategy = data.get("strategy", [])
    if not isinstance(strategy, list):
        raise ConfigurationError(f"Field 'strategy' of {where} must be a list")

    steps: List[StrategyStep] = []
    for entry in strategy:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Strategy entries of {where} must be objects")
        steps.append(StrategyStep(
            trigger_lap=_integer(_require(entry, "lap", where), "lap"),
            target_compound=TireCompound.parse(_require(entry, "compound", where)),
        ))

    return VehicleConfig(
        vehicle_id=str(_require(data, "id", where)),
        base_penalty_s=_number(data.get("base_penalty_s", 0.0), "base_penalty_s"),
        driver_penalty_s=_number(data.get("driver_penalty_s", 0.0), "driver_penalty_s"),
        grid_position=_integer(data.get("grid_position", index + 1), "grid_position"),
        start_compound=TireCompound.parse(data.get("start_compound", "medium")),
        strategy=Strategy(tuple(steps)),
    )


def race_config_from_dict(data: Mapping[str, Any]) -> RaceConfig:
    """Build a race configuration from its dictionary form.

    Args:
        data: Parsed parameter file content

    Returns:
        Validated race configuration

    Raises:
        ConfigurationError: If fields are missing, mistyped or invalid
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Parameter file must contain a JSON object")

    track_data = _require(data, "track", "parameter file")
    if not isinstance(track_data, dict):
        raise ConfigurationError("Field 'track' must be an object")
    track = Track(
        length_m=_number(_require(track_data, "length_m", "track"), "length_m"),
        lap_count=_integer(_require(track_data, "lap_count", "track"), "lap_count"),
        name=str(track_data.get("name", "Circuit")),
    )

    coefficient_data = data.get("tire_coefficients", {})
    if not isinstance(coefficient_data, dict):
        raise ConfigurationError("Field 'tire_coefficients' must be an object")

    coefficients = dict(DEFAULT_COEFFICIENTS)
    for name, coeffs in coefficient_data.items():
        if not isinstance(coeffs, dict):
            raise ConfigurationError(f"Coefficients of '{name}' must be an object")
        coefficients[TireCompound.parse(name)] = CompoundCoefficients(
            k0=_number(_require(coeffs, "k0", name), "k0"),
            k1=_number(_require(coeffs, "k1", name), "k1"),
        )

    vehicles = _require(data, "vehicles", "parameter file")
    if not isinstance(vehicles, list):
        raise ConfigurationError("Field 'vehicles' must be a list")

    config = RaceConfig(
        track=track,
        base_lap_time_s=_number(_require(data, "base_lap_time_s", "parameter file"), "base_lap_time_s"),
        vehicles=tuple(_parse_vehicle(v, i) for i, v in enumerate(vehicles)),
        tire_coefficients=coefficients,
        pit_duration_s=_number(data.get("pit_duration_s", 2.5), "pit_duration_s"),
        pit_ramp_duration_s=_number(data.get("pit_ramp_duration_s", 3.0), "pit_ramp_duration_s"),
    )
    config.validate()
    return config


def load_race_config(path: str | Path) -> RaceConfig:
    """Load a race configuration from a JSON parameter file.

    Args:
        path: Parameter file path

    Returns:
        Validated race configuration

    Raises:
        ConfigurationError: If the file is missing, not JSON, or invalid
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Parameter file not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read parameter file {path}: {e}") from e

    config = race_config_from_dict(data)
    logger.debug(f"Loaded race configuration with {len(config.vehicles)} vehicles from {path}")
    return config
