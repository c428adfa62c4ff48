"""Tests for the race controller."""

import math
from dataclasses import replace

import pytest

from gridsim.car.pit_stop import PitStatus
from gridsim.car.tires import TireCompound, TireModel
from gridsim.car.vehicle import Strategy, StrategyStep, VehicleConfig
from gridsim.errors import ConfigurationError
from gridsim.simulation.config import RaceConfig, default_race_config
from gridsim.simulation.race import RaceController
from gridsim.track.track import Track


def tick_until(controller, dt, condition, max_ticks=100000):
    """Tick until ``condition(snapshot)`` holds and return that snapshot."""
    for _ in range(max_ticks):
        snapshot = controller.tick(dt)
        if condition(snapshot):
            return snapshot
    raise AssertionError("condition not reached")


def run_to_finish(controller, dt, max_ticks):
    """Tick without keeping snapshots, failing if the race does not end."""
    ticks = 0
    while not controller.is_finished():
        controller.tick(dt)
        ticks += 1
        assert ticks <= max_ticks, "race did not finish"
    return controller.snapshot()


def exact_race_time(config: RaceConfig, vehicle: VehicleConfig) -> float:
    """Continuous-time race time of a vehicle."""
    tire_model = TireModel(config.tire_coefficients)
    pit_loss = config.pit_duration_s + config.pit_ramp_duration_s
    compound, age, total = vehicle.start_compound, 0, 0.0
    for lap in range(1, config.track.lap_count + 1):
        total += (
            config.base_lap_time_s + vehicle.base_penalty_s + vehicle.driver_penalty_s
            + tire_model.degradation_penalty(compound, age)
        )
        age += 1
        step = vehicle.strategy.step_for_lap(lap)
        if step is not None:
            if lap < config.track.lap_count:
                total += pit_loss
            compound, age = step.target_compound, 0
    return total


def short_config(lap_count: int = 3, trigger_lap: int | None = None) -> RaceConfig:
    strategy = Strategy((StrategyStep(trigger_lap, TireCompound.HARD),)) if trigger_lap else Strategy()
    return RaceConfig(
        track=Track(length_m=1000.0, lap_count=lap_count),
        base_lap_time_s=20.0,
        vehicles=(VehicleConfig("CAR", strategy=strategy),),
    )


class TestScenarios:
    """Test the reference race scenarios."""

    def test_first_lap_time(self):
        """DRV1 completes lap 1 at the model lap time."""
        controller = RaceController(default_race_config())
        snapshot = tick_until(controller, 0.1, lambda s: s.vehicle("DRV1").current_lap == 2)
        drv1 = snapshot.vehicle("DRV1")

        expected = 95.0 + 0.1 + 0.5  # base + vehicle + fresh Medium
        assert drv1.lap_times[0] == pytest.approx(expected, abs=0.1)
        assert expected - 1e-6 <= snapshot.elapsed_s <= expected + 0.1 + 1e-6
        assert drv1.tire_age == 1
        assert drv1.status is PitStatus.ON_TRACK

    def test_pit_stop_after_trigger_lap(self):
        """DRV2 pits right after lap 12 and returns after ramps and standstill."""
        controller = RaceController(default_race_config())
        before = tick_until(controller, 0.1, lambda s: s.vehicle("DRV2").current_lap == 12)
        assert before.vehicle("DRV2").tire_age == 11
        assert before.vehicle("DRV2").compound is TireCompound.SOFT

        entry = tick_until(controller, 0.1, lambda s: s.vehicle("DRV2").current_lap == 13)
        drv2 = entry.vehicle("DRV2")
        assert drv2.status is PitStatus.PITLANE
        assert drv2.pit_timer_remaining_s == pytest.approx(2.5)
        assert drv2.compound is TireCompound.MEDIUM
        assert drv2.tire_age == 0
        assert drv2.pit_stops == 1

        timers = []
        exit_ = tick_until(
            controller, 0.1,
            lambda s: timers.append(s.vehicle("DRV2").pit_timer_remaining_s)
            or s.vehicle("DRV2").status is PitStatus.ON_TRACK,
        )
        in_pit = [t for t in timers if t is not None]
        assert all(b <= a for a, b in zip(in_pit, in_pit[1:]))
        assert exit_.vehicle("DRV2").pit_timer_remaining_s is None

        in_pitlane_s = exit_.elapsed_s - entry.elapsed_s
        assert 8.5 - 1e-6 <= in_pitlane_s <= 8.5 + 0.1 + 1e-6

    @pytest.mark.parametrize("dt", [1.0, 0.5, 0.25, 0.1])
    def test_race_terminates(self, dt):
        """The two-vehicle race finishes in a bounded number of ticks."""
        controller = RaceController(default_race_config())
        bound = math.ceil(3500.0 / dt)
        final = run_to_finish(controller, dt, bound)

        assert final.is_finished
        for v in final.vehicles:
            assert len(v.lap_times) == 30
            assert v.current_lap == 31
            assert v.pit_stops == 1

    def test_pit_on_last_lap_does_not_stall(self):
        """A stop declared for the final lap is taken and the vehicle still finishes."""
        controller = RaceController(short_config(lap_count=3, trigger_lap=3))
        final = run_to_finish(controller, 0.1, 1000)
        car = final.vehicle("CAR")

        assert controller.is_finished()
        assert car.finished
        assert car.pit_stops == 1
        assert car.compound is TireCompound.HARD
        assert len(car.lap_times) == 3

    def test_pit_time_loss(self):
        """A stop costs the standstill plus one ramp duration."""
        no_stop = run_to_finish(RaceController(short_config(lap_count=3)), 0.01, 10000)
        config = short_config(lap_count=3, trigger_lap=1)
        with_stop = run_to_finish(RaceController(config), 0.01, 10000)

        vehicle = config.vehicles[0]
        assert with_stop.vehicle("CAR").cumulative_race_time_s == pytest.approx(
            exact_race_time(config, vehicle), abs=0.01
        )
        assert with_stop.vehicle("CAR").lap_times[1] > no_stop.vehicle("CAR").lap_times[1] + 5.0


class TestInvariants:
    """Test per-tick invariants across a full race."""

    def test_invariants_hold_every_tick(self):
        """Position, lap, tire age and status evolve only as allowed."""
        config = default_race_config()
        length = config.track.length_m
        snapshots = RaceController(config).run(0.5)

        assert snapshots[-1].is_finished
        for prev, cur in zip(snapshots, snapshots[1:]):
            assert cur.tick == prev.tick + 1
            for p, c in zip(prev.vehicles, cur.vehicles):
                assert 0.0 <= c.position_m < length
                assert c.current_lap - p.current_lap in (0, 1)

                if c.pit_stops > p.pit_stops:
                    # Compound change at a lap boundary
                    assert c.tire_age == 0
                    assert c.current_lap == p.current_lap + 1
                elif c.current_lap > p.current_lap:
                    assert c.tire_age == p.tire_age + 1
                else:
                    assert c.tire_age == p.tire_age
                    assert c.compound is p.compound

                if p.status is PitStatus.ON_TRACK and c.status is PitStatus.PITLANE:
                    assert c.current_lap == p.current_lap + 1
                if p.status is PitStatus.PITLANE and c.status is PitStatus.ON_TRACK:
                    assert p.pit_timer_remaining_s == pytest.approx(0.0, abs=1e-9)

                if c.status is PitStatus.ON_TRACK:
                    assert c.pit_timer_remaining_s is None
                else:
                    assert c.pit_timer_remaining_s >= 0.0

    def test_large_steps_complete_one_lap_per_tick(self):
        """Steps covering several laps still advance one lap per tick."""
        config = RaceConfig(
            track=Track(length_m=10.0, lap_count=5),
            base_lap_time_s=1.0,
            vehicles=(VehicleConfig("CAR"),),
        )
        snapshots = RaceController(config).run(3.0)

        laps = [s.vehicle("CAR").current_lap for s in snapshots]
        assert laps == [2, 3, 4, 5, 6]
        assert all(t >= 0.0 for t in snapshots[-1].vehicle("CAR").lap_times)

    def test_determinism(self):
        """Identical inputs give bit-identical tables."""
        first = RaceController(default_race_config()).run(0.1)[-1]
        second = RaceController(default_race_config()).run(0.1)[-1]

        for a, b in zip(first.vehicles, second.vehicles):
            assert a.lap_times == b.lap_times
            assert a.cumulative_race_time_s == b.cumulative_race_time_s

    def test_convergence(self):
        """Race time approaches the continuous-time value as the step shrinks."""
        base = default_race_config()
        config = replace(
            base,
            track=replace(base.track, lap_count=8),
            vehicles=(
                replace(base.vehicles[0], strategy=Strategy((StrategyStep(4, TireCompound.HARD),))),
                replace(base.vehicles[1], strategy=Strategy((StrategyStep(5, TireCompound.MEDIUM),))),
            ),
        )

        totals = {}
        for dt in (0.1, 0.01):
            final = run_to_finish(RaceController(config), dt, math.ceil(1000.0 / dt))
            totals[dt] = {v.vehicle_id: v.cumulative_race_time_s for v in final.vehicles}

        for vehicle in config.vehicles:
            exact = exact_race_time(config, vehicle)
            coarse = totals[0.1][vehicle.vehicle_id]
            fine = totals[0.01][vehicle.vehicle_id]
            assert abs(coarse - exact) <= 0.1 * 0.1 + 1e-6
            assert abs(fine - exact) <= 0.1 * 0.01 + 1e-6
            assert abs(coarse - fine) <= 0.02


class TestRaceController:
    """Test controller bookkeeping."""

    def test_vehicles_in_grid_order(self):
        """Snapshots list vehicles by grid position."""
        base = default_race_config()
        config = replace(base, vehicles=tuple(reversed(base.vehicles)))
        snapshot = RaceController(config).snapshot()

        assert [v.vehicle_id for v in snapshot.vehicles] == ["DRV1", "DRV2"]
        assert all(v.position_m == 0.0 for v in snapshot.vehicles)

    def test_run_can_be_cancelled(self):
        """Cancellation is honored between ticks."""
        controller = RaceController(default_race_config())
        calls = []

        def should_stop():
            calls.append(1)
            return len(calls) > 10

        snapshots = controller.run(0.1, should_stop=should_stop)

        assert len(snapshots) == 10
        assert not controller.is_finished()
        assert controller.snapshot() == snapshots[-1]

    def test_finished_vehicles_stop_moving(self):
        """Terminal vehicles are no longer advanced."""
        controller = RaceController(short_config(lap_count=1))
        final = run_to_finish(controller, 0.1, 1000)
        after = controller.tick(0.1)

        assert after.vehicle("CAR").position_m == final.vehicle("CAR").position_m
        assert after.vehicle("CAR").lap_times == final.vehicle("CAR").lap_times

    def test_invalid_step_size(self):
        """Step sizes must be positive."""
        controller = RaceController(default_race_config())
        with pytest.raises(ConfigurationError):
            controller.tick(0.0)
        with pytest.raises(ConfigurationError):
            controller.run(-0.1)

    def test_reset(self):
        """Reset puts every vehicle back on the grid."""
        controller = RaceController(default_race_config())
        for _ in range(50):
            controller.tick(0.1)
        controller.reset()

        assert controller.tick_count == 0
        assert controller.elapsed_s == 0.0
        assert all(v.position_m == 0.0 for v in controller.snapshot().vehicles)

    def test_invalid_config_rejected(self):
        """Construction validates the scenario."""
        config = replace(default_race_config(), base_lap_time_s=-1.0)
        with pytest.raises(ConfigurationError):
            RaceController(config)
