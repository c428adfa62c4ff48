"""
Position integrator - Per-tick distance update along the track.

Explicit first-order integration of ``speed = track_length / lap_time``.
The motion state supplies the drive time of the tick, i.e. the tick
duration scaled by the pit lane speed profile, so racing and pit lane
motion share one update rule.
"""

from typing import Optional

import numpy as np

from gridsim.simulation.state import VehicleState


class PositionIntegrator:
    """Advance vehicle positions and detect start/finish line crossings.

    At most one line crossing is reported per tick. Distance beyond a full
    lap after that crossing is held back and added on the next tick, so the
    position always stays within ``[0, track_length)``.

    Usage:
        integrator = PositionIntegrator(track_length_m=5554.0)
        fraction = integrator.advance(vehicle, drive_time, lap_time)
    """

    def __init__(self, track_length_m: float):
        """Initialize integrator.

        Args:
            track_length_m: Track length in meters
        """
        assert track_length_m > 0.0
        self.track_length_m = float(track_length_m)
        # Largest representable position below the track length
        self._max_position_m = float(np.nextafter(self.track_length_m, 0.0))

    def distance(self, drive_time_s: float, lap_time_s: float) -> float:
        """Distance covered in ``drive_time_s`` at the given lap time pace."""
        return drive_time_s / lap_time_s * self.track_length_m

    def advance(
        self,
        vehicle: VehicleState,
        drive_time_s: float,
        lap_time_s: float,
    ) -> Optional[float]:
        """Move a vehicle forward by one tick.

        Args:
            vehicle: Vehicle state, position updated in place
            drive_time_s: Tick time at full racing speed
            lap_time_s: Theoretical lap time for this tick

        Returns:
            Fraction of the tick at which the line was crossed, or None if
            no lap was completed
        """
        assert lap_time_s > 0.0, "lap time must be positive"
        assert drive_time_s >= 0.0, "drive time must not be negative"

        length = self.track_length_m
        start = vehicle.position_m
        covered = vehicle.overflow_m + self.distance(drive_time_s, lap_time_s)
        vehicle.overflow_m = 0.0
        new_position = start + covered

        if new_position < length:
            vehicle.position_m = new_position
            self._check(vehicle)
            return None

        fraction = (length - start) / covered if covered > 0.0 else 1.0
        new_position -= length
        if new_position >= length:
            vehicle.overflow_m = new_position - self._max_position_m
            new_position = self._max_position_m

        vehicle.position_m = new_position
        self._check(vehicle)
        return min(max(fraction, 0.0), 1.0)

    def _check(self, vehicle: VehicleState) -> None:
        assert 0.0 <= vehicle.position_m < self.track_length_m, (
            f"{vehicle.vehicle_id} position {vehicle.position_m} outside track"
        )
