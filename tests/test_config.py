"""Tests for race configuration and run options."""

import json
import math
from dataclasses import FrozenInstanceError, replace
from pathlib import Path

import pytest

from gridsim.car.tires import TireCompound
from gridsim.car.vehicle import Strategy, StrategyStep, VehicleConfig
from gridsim.errors import ConfigurationError
from gridsim.simulation.config import (
    RaceConfig,
    SimOptions,
    default_race_config,
    load_race_config,
    race_config_from_dict,
)
from gridsim.simulation.race import RaceController
from gridsim.track.track import Track


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestDefaultScenario:
    """Test the built-in two-vehicle race."""

    def test_scenario_values(self):
        """Built-in race matches the reference scenario."""
        config = default_race_config()

        assert config.track.length_m == 5554.0
        assert config.track.lap_count == 30
        assert config.base_lap_time_s == 95.0
        assert config.pit_duration_s == 2.5

        drv1, drv2 = config.vehicles
        assert drv1.vehicle_id == "DRV1"
        assert drv1.base_penalty_s == pytest.approx(0.1)
        assert drv1.start_compound is TireCompound.MEDIUM
        assert drv1.strategy.step_for_lap(15).target_compound is TireCompound.HARD
        assert drv2.strategy.step_for_lap(12).target_compound is TireCompound.MEDIUM

    def test_default_scenario_is_valid(self):
        """Built-in race passes validation."""
        default_race_config().validate()

    def test_config_is_immutable(self):
        """Configuration cannot be changed after construction."""
        config = default_race_config()
        with pytest.raises(FrozenInstanceError):
            config.base_lap_time_s = 90.0
        with pytest.raises(TypeError):
            config.tire_coefficients[TireCompound.SOFT] = None


class TestValidation:
    """Test scenario validation rules."""

    def test_non_positive_lap_time(self):
        """A vehicle that would lap in zero or negative time is rejected."""
        config = replace(
            default_race_config(),
            vehicles=(VehicleConfig("FAST", driver_penalty_s=-96.0),),
        )
        with pytest.raises(ConfigurationError, match="non-positive lap time"):
            config.validate()

    def test_lap_time_checked_for_every_stint(self):
        """Later stints on other compounds are checked too."""
        config = RaceConfig(
            track=Track(length_m=1000.0, lap_count=5),
            base_lap_time_s=1.0,
            vehicles=(
                VehicleConfig(
                    "CAR",
                    driver_penalty_s=-1.2,
                    start_compound=TireCompound.HARD,
                    strategy=Strategy((StrategyStep(2, TireCompound.SOFT),)),
                ),
            ),
        )
        with pytest.raises(ConfigurationError, match="soft"):
            config.validate()

    def test_duplicate_vehicle_ids(self):
        """Vehicle ids are unique."""
        config = replace(
            default_race_config(),
            vehicles=(VehicleConfig("A", grid_position=1), VehicleConfig("A", grid_position=2)),
        )
        with pytest.raises(ConfigurationError, match="unique"):
            config.validate()

    def test_duplicate_grid_positions(self):
        """Grid positions are unique."""
        config = replace(
            default_race_config(),
            vehicles=(VehicleConfig("A", grid_position=1), VehicleConfig("B", grid_position=1)),
        )
        with pytest.raises(ConfigurationError, match="Grid positions"):
            config.validate()

    @pytest.mark.parametrize("length, laps", [(0.0, 30), (-5.0, 30), (5554.0, 0)])
    def test_invalid_track(self, length, laps):
        """Track length and lap count are positive."""
        config = replace(default_race_config(), track=Track(length_m=length, lap_count=laps))
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_no_vehicles(self):
        """A race needs at least one vehicle."""
        with pytest.raises(ConfigurationError):
            replace(default_race_config(), vehicles=()).validate()

    def test_negative_pit_duration(self):
        """Pit durations are not negative."""
        with pytest.raises(ConfigurationError):
            replace(default_race_config(), pit_duration_s=-1.0).validate()

    @pytest.mark.parametrize("field_name", ["pit_duration_s", "pit_ramp_duration_s"])
    @pytest.mark.parametrize("value", [math.inf, math.nan])
    def test_non_finite_pit_durations(self, field_name, value):
        """Pit durations must be finite or the vehicle never leaves the pit lane."""
        config = replace(default_race_config(), **{field_name: value})
        with pytest.raises(ConfigurationError, match="finite"):
            config.validate()

    @pytest.mark.parametrize("field_name", ["base_penalty_s", "driver_penalty_s"])
    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_penalties(self, field_name, value):
        """Vehicle and driver penalties must be finite."""
        base = default_race_config()
        vehicles = (replace(base.vehicles[0], **{field_name: value}), base.vehicles[1])
        with pytest.raises(ConfigurationError, match="finite"):
            replace(base, vehicles=vehicles).validate()

    @pytest.mark.parametrize("length", [math.inf, math.nan])
    def test_non_finite_track_length(self, length):
        """The track length must be finite."""
        config = replace(default_race_config(), track=Track(length_m=length, lap_count=30))
        with pytest.raises(ConfigurationError, match="Track length"):
            config.validate()

    def test_non_finite_values_rejected_before_the_race(self):
        """Infinite values from a parameter file never reach the race loop."""
        for mutate in (
            lambda d: d.update(pit_duration_s=math.inf),
            lambda d: d["vehicles"][0].update(base_penalty_s=math.inf),
            lambda d: d["track"].update(length_m=math.inf),
        ):
            data = default_race_config().to_dict()
            mutate(data)
            with pytest.raises(ConfigurationError):
                RaceController(race_config_from_dict(data))


class TestSimOptions:
    """Test run option validation."""

    def test_defaults(self):
        """Defaults match the command line defaults."""
        options = SimOptions()
        options.validate()

        assert options.timestep_size == 0.1
        assert options.realtime_factor == 1.0
        assert not options.gui

    @pytest.mark.parametrize("dt", [0.0, -0.1, float("nan"), float("inf")])
    def test_invalid_timestep(self, dt):
        """Step size must be a positive number."""
        with pytest.raises(ConfigurationError, match="Timestep"):
            SimOptions(timestep_size=dt).validate()

    def test_invalid_realtime_factor(self):
        """Realtime factor must be positive."""
        with pytest.raises(ConfigurationError, match="Realtime"):
            SimOptions(realtime_factor=0.0).validate()


class TestParameterFile:
    """Test JSON parameter file loading."""

    def test_round_trip_of_default_scenario(self, tmp_path):
        """The default scenario survives serialization to a parameter file."""
        path = write_json(tmp_path / "race.json", default_race_config().to_dict())
        loaded = load_race_config(path)

        assert loaded.to_dict() == default_race_config().to_dict()

    def test_minimal_file(self, tmp_path):
        """Optional fields fall back to defaults."""
        path = write_json(tmp_path / "race.json", {
            "track": {"length_m": 3000.0, "lap_count": 10},
            "base_lap_time_s": 80.0,
            "vehicles": [
                {"id": "A"},
                {"id": "B", "start_compound": "Soft", "strategy": [{"lap": 5, "compound": "Hard"}]},
            ],
        })
        config = load_race_config(path)

        assert config.track.lap_count == 10
        assert config.pit_duration_s == 2.5
        assert [v.grid_position for v in config.vehicles] == [1, 2]
        assert config.vehicles[1].strategy.step_for_lap(5).target_compound is TireCompound.HARD

    def test_custom_coefficients(self, tmp_path):
        """Coefficients given in the file override the defaults."""
        data = default_race_config().to_dict()
        data["tire_coefficients"] = {"soft": {"k0": 0.2, "k1": 0.3}}
        config = race_config_from_dict(data)

        assert config.tire_coefficients[TireCompound.SOFT].k1 == pytest.approx(0.3)
        assert config.tire_coefficients[TireCompound.HARD].k0 == pytest.approx(1.0)

    def test_missing_file(self, tmp_path):
        """A missing parameter file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_race_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Malformed JSON is a configuration error."""
        path = tmp_path / "race.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_race_config(path)

    def test_missing_field(self, tmp_path):
        """Required fields are reported by name."""
        path = write_json(tmp_path / "race.json", {
            "track": {"length_m": 3000.0, "lap_count": 10},
            "vehicles": [{"id": "A"}],
        })
        with pytest.raises(ConfigurationError, match="base_lap_time_s"):
            load_race_config(path)

    def test_wrong_type(self):
        """Fields with the wrong type are rejected."""
        data = default_race_config().to_dict()
        data["track"]["lap_count"] = "thirty"
        with pytest.raises(ConfigurationError, match="lap_count"):
            race_config_from_dict(data)

    def test_strategy_must_be_a_list(self):
        """A strategy that is not a list is a configuration error."""
        data = default_race_config().to_dict()
        data["vehicles"][0]["strategy"] = 5
        with pytest.raises(ConfigurationError, match="strategy"):
            race_config_from_dict(data)

    def test_coefficients_must_be_an_object(self):
        """A coefficient table that is not an object is a configuration error."""
        data = default_race_config().to_dict()
        data["tire_coefficients"] = [1, 2]
        with pytest.raises(ConfigurationError, match="tire_coefficients"):
            race_config_from_dict(data)

    def test_infinity_in_parameter_file(self, tmp_path):
        """JSON Infinity values are rejected on load."""
        path = tmp_path / "race.json"
        path.write_text(json.dumps(default_race_config().to_dict()).replace(
            '"pit_duration_s": 2.5', '"pit_duration_s": Infinity'
        ))
        with pytest.raises(ConfigurationError, match="Pit duration"):
            load_race_config(path)

    def test_unknown_compound(self):
        """Unknown compounds are rejected."""
        data = default_race_config().to_dict()
        data["vehicles"][0]["strategy"] = [{"lap": 10, "compound": "wet"}]
        with pytest.raises(ConfigurationError, match="wet"):
            race_config_from_dict(data)

    def test_unordered_strategy(self):
        """Strategy laps from a file must increase."""
        data = default_race_config().to_dict()
        data["vehicles"][0]["strategy"] = [
            {"lap": 10, "compound": "hard"},
            {"lap": 8, "compound": "soft"},
        ]
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            race_config_from_dict(data)
