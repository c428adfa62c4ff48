"""Tests for wall-clock pacing."""

import logging

import pytest

from gridsim.car.vehicle import VehicleConfig
from gridsim.errors import ConfigurationError
from gridsim.simulation.config import RaceConfig
from gridsim.simulation.pacing import iter_realtime
from gridsim.simulation.race import RaceController
from gridsim.track.track import Track


class FakeClock:
    """Manual clock; each tick of work costs ``work_s`` seconds."""

    def __init__(self, work_s: float = 0.0):
        self.now = 0.0
        self.work_s = work_s
        self.sleeps = []
        self._reads = 0

    def clock(self) -> float:
        # Every second read ends a tick
        self._reads += 1
        if self._reads % 2 == 0:
            self.now += self.work_s
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def short_race() -> RaceController:
    config = RaceConfig(
        track=Track(length_m=100.0, lap_count=1),
        base_lap_time_s=2.0,
        vehicles=(VehicleConfig("CAR"),),
    )
    return RaceController(config)


class TestIterRealtime:
    """Test pacing, lag detection and cancellation."""

    def test_sleeps_to_match_realtime_factor(self):
        """Each tick takes dt / factor of wall-clock time."""
        fake = FakeClock(work_s=0.01)
        snapshots = list(
            iter_realtime(short_race(), 0.1, realtime_factor=2.0, clock=fake.clock, sleep=fake.sleep)
        )

        assert snapshots[-1].is_finished
        assert len(fake.sleeps) == len(snapshots)
        assert all(s == pytest.approx(0.04) for s in fake.sleeps)

    def test_same_result_as_batch(self):
        """Pacing does not change the simulation."""
        fake = FakeClock()
        paced = list(iter_realtime(short_race(), 0.1, clock=fake.clock, sleep=fake.sleep))
        batch = short_race().run(0.1)

        assert paced[-1].vehicle("CAR").lap_times == batch[-1].vehicle("CAR").lap_times

    def test_lag_warning_once_per_streak(self, caplog):
        """Falling behind is reported once, not every tick."""
        fake = FakeClock(work_s=1.0)
        with caplog.at_level(logging.WARNING, logger="gridsim"):
            list(iter_realtime(short_race(), 0.1, clock=fake.clock, sleep=fake.sleep))

        warnings = [r for r in caplog.records if "cannot keep up" in r.getMessage()]
        assert len(warnings) == 1
        assert fake.sleeps == []

    def test_cancellation(self):
        """A stop request ends the iteration between ticks."""
        fake = FakeClock()
        count = 0

        def should_stop():
            return count >= 5

        controller = short_race()
        for _ in iter_realtime(controller, 0.1, should_stop=should_stop, clock=fake.clock, sleep=fake.sleep):
            count += 1

        assert count == 5
        assert controller.tick_count == 5
        assert not controller.is_finished()

    def test_invalid_factor(self):
        """The realtime factor must be positive."""
        with pytest.raises(ConfigurationError):
            next(iter_realtime(short_race(), 0.1, realtime_factor=0.0))
