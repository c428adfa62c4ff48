"""
Track - Race track record.

Contains:
- Track length and race distance in laps
- Optional centerline geometry used for coordinate lookup
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math

from gridsim.errors import ConfigurationError
from gridsim.track.geometry import TrackGeometry


@dataclass(frozen=True)
class Track:
    """Closed race track, immutable for the race duration.

    The simulation only needs the length and lap count; geometry is
    required only when positions are turned into coordinates.
    """
    length_m: float
    lap_count: int
    name: str = "Circuit"
    geometry: Optional[TrackGeometry] = None

    def validate(self) -> None:
        """Check track parameters.

        Raises:
            ConfigurationError: If length is not a positive finite number or
                lap count is not a positive integer
        """
        if not (math.isfinite(self.length_m) and self.length_m > 0.0):
            raise ConfigurationError(f"Track length must be positive, got {self.length_m}")
        if not isinstance(self.lap_count, int) or self.lap_count < 1:
            raise ConfigurationError(
                f"Lap count must be a positive integer, got {self.lap_count!r}"
            )
        if self.geometry is not None and self.geometry.length_m != self.length_m:
            raise ConfigurationError(
                f"Geometry length {self.geometry.length_m} does not match "
                f"track length {self.length_m}"
            )

    def coordinates_at(self, distance_m: float) -> Tuple[float, float]:
        """Get world coordinates at a distance along the track.

        Args:
            distance_m: Distance from the start line in meters

        Returns:
            Tuple of (x, y) coordinates

        Raises:
            RuntimeError: If the track has no geometry
        """
        if self.geometry is None:
            raise RuntimeError(f"Track '{self.name}' has no geometry loaded")
        return self.geometry.coordinates_at(distance_m)
