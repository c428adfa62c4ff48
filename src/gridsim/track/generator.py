"""
Track generator - Synthetic closed-loop centerlines.

Generates stadium-shaped layouts (two straights joined by two half
circles) of an exact length, sampled at a fixed spacing. Useful when no
measured track file is at hand.
"""

from dataclasses import dataclass

import numpy as np

from gridsim.errors import ConfigurationError
from gridsim.track.geometry import TrackGeometry


@dataclass
class GeneratorConfig:
    """Configuration for closed-loop generation."""
    straight_fraction: float = 0.6   # Share of the lap on the two straights
    sample_spacing_m: float = 1.0    # Distance between samples


class TrackGenerator:
    """Stadium-shaped centerline generator.

    Usage:
        generator = TrackGenerator()
        geometry = generator.generate(5554.0)
    """

    def __init__(self, config: GeneratorConfig | None = None):
        """Initialize generator with optional configuration.

        Args:
            config: Generator configuration. Uses defaults if None.
        """
        self.config = config or GeneratorConfig()

    def generate(self, length_m: float) -> TrackGeometry:
        """Generate a closed loop of the given length.

        The start line sits in the middle of the lower straight and the
        loop runs counter-clockwise.

        Args:
            length_m: Track length in meters

        Returns:
            Sampled track geometry
        """
        if not length_m > 0.0:
            raise ConfigurationError(f"Track length must be positive, got {length_m}")
        if not 0.0 <= self.config.straight_fraction < 1.0:
            raise ConfigurationError("straight_fraction must be in [0, 1)")
        if not self.config.sample_spacing_m > 0.0:
            raise ConfigurationError("sample_spacing_m must be positive")

        straight = 0.5 * self.config.straight_fraction * length_m
        arc = 0.5 * (length_m - 2.0 * straight)
        radius = arc / np.pi

        d = np.arange(0.0, length_m, self.config.sample_spacing_m)
        # Offset so the lap starts halfway down the lower straight
        s = (d + 0.5 * straight) % length_m

        x = np.empty_like(s)
        y = np.empty_like(s)

        # Lower straight, heading +x
        m = s < straight
        x[m] = s[m]
        y[m] = 0.0

        # Right half circle
        m = (s >= straight) & (s < straight + arc)
        phi = (s[m] - straight) / radius if radius > 0 else np.zeros(np.count_nonzero(m))
        x[m] = straight + radius * np.sin(phi)
        y[m] = radius - radius * np.cos(phi)

        # Upper straight, heading -x
        m = (s >= straight + arc) & (s < 2.0 * straight + arc)
        x[m] = straight - (s[m] - straight - arc)
        y[m] = 2.0 * radius

        # Left half circle
        m = s >= 2.0 * straight + arc
        phi = (s[m] - 2.0 * straight - arc) / radius if radius > 0 else np.zeros(np.count_nonzero(m))
        x[m] = -radius * np.sin(phi)
        y[m] = radius + radius * np.cos(phi)

        return TrackGeometry(d, x, y, length_m)


def generate_closed_loop(length_m: float, sample_spacing_m: float = 1.0) -> TrackGeometry:
    """Generate a stadium-shaped loop with default proportions.

    Args:
        length_m: Track length in meters
        sample_spacing_m: Distance between samples

    Returns:
        Sampled track geometry
    """
    return TrackGenerator(GeneratorConfig(sample_spacing_m=sample_spacing_m)).generate(length_m)
