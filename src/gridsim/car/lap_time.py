"""
Lap time model - Theoretical lap time from compounding penalties.

A vehicle's theoretical lap time is the track's base lap time plus the
vehicle, driver and tire penalties. It is recomputed every tick because
tire age changes at lap boundaries.
"""

from gridsim.car.tires import TireModel, TireState
from gridsim.car.vehicle import VehicleConfig


class LapTimeModel:
    """Compose base lap time with vehicle, driver and tire penalties."""

    def __init__(self, base_lap_time_s: float, tire_model: TireModel | None = None):
        """Initialize lap time model.

        Args:
            base_lap_time_s: Reference lap time of the track in seconds
            tire_model: Tire degradation model. Uses defaults if None.
        """
        self.base_lap_time_s = base_lap_time_s
        self.tire_model = tire_model or TireModel()

    def theoretical_lap_time(self, config: VehicleConfig, tires: TireState) -> float:
        """Lap time predicted for the vehicle on its current tires.

        Args:
            config: Vehicle parameters
            tires: Currently fitted tire set

        Returns:
            Lap time in seconds. Positive for every validated configuration.
        """
        return (
            self.base_lap_time_s
            + config.base_penalty_s
            + config.driver_penalty_s
            + self.tire_model.degradation_penalty(tires.compound, tires.age)
        )
