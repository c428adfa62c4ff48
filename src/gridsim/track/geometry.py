"""
Track geometry - Sampled centerline and continuous coordinate lookup.

Provides:
- TrackGeometry: immutable (distance, x, y) samples of a closed track
- Linear interpolation of coordinates at any distance, wrapping the loop
- CSV loading and saving of centerline samples
"""

from pathlib import Path
from typing import List, Sequence, Tuple
import logging

import numpy as np

from gridsim.errors import TrackLoadError

logger = logging.getLogger(__name__)

CSV_HEADER = "distance_m,x_m,y_m"


class TrackGeometry:
    """Closed track centerline sampled along the racing distance.

    Samples satisfy ``d_0 = 0 < d_1 < ... < d_{n-1} < length``. Lookups
    interpolate linearly between the two bracketing samples and close the
    loop between the last and the first sample.

    Usage:
        geometry = TrackGeometry([0.0, 10.0, 20.0], [0, 10, 10], [0, 0, 10], 30.0)
        x, y = geometry.coordinates_at(15.0)
    """

    def __init__(
        self,
        distances: Sequence[float],
        xs: Sequence[float],
        ys: Sequence[float],
        length_m: float,
    ):
        """Initialize geometry from sample columns.

        Args:
            distances: Distance of each sample from the start line
            xs: X coordinate of each sample
            ys: Y coordinate of each sample
            length_m: Track length in meters

        Raises:
            TrackLoadError: If the samples do not describe a valid loop
        """
        d = np.array(distances, dtype=float)
        x = np.array(xs, dtype=float)
        y = np.array(ys, dtype=float)

        if not length_m > 0.0:
            raise TrackLoadError(f"Track length must be positive, got {length_m}")
        if d.ndim != 1 or d.shape != x.shape or d.shape != y.shape:
            raise TrackLoadError("Distance and coordinate columns must have equal length")
        if len(d) < 2:
            raise TrackLoadError(f"Track needs at least 2 samples, got {len(d)}")
        if not (np.all(np.isfinite(d)) and np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise TrackLoadError("Track samples must be finite numbers")
        if d[0] != 0.0:
            raise TrackLoadError(f"First sample must be at distance 0, got {d[0]}")
        if np.any(np.diff(d) <= 0.0):
            raise TrackLoadError("Sample distances must be strictly increasing")
        if d[-1] >= length_m:
            raise TrackLoadError(
                f"Last sample distance {d[-1]} must be below the track length {length_m}"
            )

        for arr in (d, x, y):
            arr.flags.writeable = False

        self._d = d
        self._x = x
        self._y = y
        self._length_m = float(length_m)

    @classmethod
    def from_samples(
        cls,
        samples: Sequence[Tuple[float, float, float]],
        length_m: float,
    ) -> "TrackGeometry":
        """Build geometry from (distance, x, y) rows."""
        arr = np.asarray(samples, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise TrackLoadError("Track samples must be (distance, x, y) rows")
        return cls(arr[:, 0], arr[:, 1], arr[:, 2], length_m)

    @property
    def length_m(self) -> float:
        """Track length in meters."""
        return self._length_m

    @property
    def num_samples(self) -> int:
        """Number of centerline samples."""
        return len(self._d)

    @property
    def distances(self) -> np.ndarray:
        """Read-only sample distances."""
        return self._d

    @property
    def xs(self) -> np.ndarray:
        """Read-only sample X coordinates."""
        return self._x

    @property
    def ys(self) -> np.ndarray:
        """Read-only sample Y coordinates."""
        return self._y

    def coordinates_at(self, distance_m: float) -> Tuple[float, float]:
        """Get centerline coordinates at a distance along the track.

        Args:
            distance_m: Distance from the start line, wrapped to the track length

        Returns:
            Tuple of (x, y) coordinates
        """
        d = distance_m % self._length_m
        x = np.interp(d, self._d, self._x, period=self._length_m)
        y = np.interp(d, self._d, self._y, period=self._length_m)
        return (float(x), float(y))

    def closed_polyline(self) -> Tuple[np.ndarray, np.ndarray]:
        """Get the centerline as a closed polyline for drawing.

        Returns:
            Tuple of (xs, ys) with the first sample repeated at the end
        """
        return (np.append(self._x, self._x[0]), np.append(self._y, self._y[0]))


def _is_numeric_row(line: str) -> bool:
    try:
        [float(field) for field in line.split(",")]
    except ValueError:
        return False
    return True


def load_track_csv(path: str | Path, length_m: float) -> TrackGeometry:
    """Load centerline samples from a comma-separated file.

    Rows hold ``distance, x, y``. Blank lines and lines starting with ``#``
    are ignored, and a non-numeric first row is treated as a header.

    Args:
        path: Track file path
        length_m: Track length in meters

    Returns:
        Loaded track geometry

    Raises:
        TrackLoadError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.is_file():
        raise TrackLoadError(f"Track file not found: {path}")

    try:
        with open(path, encoding="utf-8") as fh:
            lines: List[str] = [
                line for line in fh
                if line.strip() and not line.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise TrackLoadError(f"Failed to read track file {path}: {e}") from e

    if lines and not _is_numeric_row(lines[0]):
        lines = lines[1:]
    if not lines:
        raise TrackLoadError(f"Track file {path} contains no samples")

    try:
        data = np.loadtxt(lines, delimiter=",", ndmin=2)
    except ValueError as e:
        raise TrackLoadError(f"Failed to parse track file {path}: {e}") from e

    if data.shape[1] != 3:
        raise TrackLoadError(
            f"Track file {path} must have 3 columns (distance, x, y), found {data.shape[1]}"
        )

    geometry = TrackGeometry(data[:, 0], data[:, 1], data[:, 2], length_m)
    logger.debug(f"Loaded {geometry.num_samples} track samples from {path}")
    return geometry


def save_track_csv(geometry: TrackGeometry, path: str | Path) -> Path:
    """Write centerline samples to a comma-separated file.

    Args:
        geometry: Geometry to save
        path: Output file path

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = np.column_stack([geometry.distances, geometry.xs, geometry.ys])
    np.savetxt(path, data, delimiter=",", fmt="%.3f", header=CSV_HEADER, comments="")
    return path
