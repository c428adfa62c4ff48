#!/usr/bin/env python3
"""
Track Generation Example

This example demonstrates how to:
1. Generate closed-loop centerlines of a given length
2. Change the layout proportions
3. Save a centerline as a track file and load it back
4. Look up coordinates along the track

Run with: python generate_tracks.py [output_dir]
"""

from pathlib import Path
import sys

import numpy as np

from gridsim.track import (
    GeneratorConfig,
    Track,
    TrackGenerator,
    TrackGeometry,
    generate_closed_loop,
    load_track_csv,
    save_track_csv,
)


def describe(geometry: TrackGeometry) -> None:
    xs, ys = geometry.closed_polyline()
    print(f"Length: {geometry.length_m:.0f} m")
    print(f"Samples: {geometry.num_samples}")
    print(f"Extent: {xs.max() - xs.min():.0f} m x {ys.max() - ys.min():.0f} m")


def generate_default_track() -> TrackGeometry:
    """Generate a loop with default proportions."""
    print("=" * 60)
    print("1. Default Loop")
    print("=" * 60)

    geometry = generate_closed_loop(5554.0)
    print()
    describe(geometry)
    return geometry


def generate_proportions():
    """Compare loops with more or less straight."""
    print("\n" + "=" * 60)
    print("2. Layout Proportions")
    print("=" * 60)

    for fraction in (0.2, 0.6, 0.9):
        generator = TrackGenerator(GeneratorConfig(straight_fraction=fraction, sample_spacing_m=5.0))
        print(f"\nStraight fraction {fraction:.1f}:")
        describe(generator.generate(4000.0))


def save_and_load(geometry: TrackGeometry, output_dir: Path) -> Track:
    """Write the centerline to a track file and read it back."""
    print("\n" + "=" * 60)
    print("3. Track File")
    print("=" * 60)

    path = save_track_csv(geometry, output_dir / "loop.csv")
    loaded = load_track_csv(path, geometry.length_m)
    print(f"\nSaved {geometry.num_samples} samples to {path}")
    print(f"Loaded {loaded.num_samples} samples back")

    max_error = max(
        np.abs(loaded.xs - geometry.xs).max(),
        np.abs(loaded.ys - geometry.ys).max(),
    )
    print(f"Max coordinate difference: {max_error:.4f} m")

    return Track(length_m=geometry.length_m, lap_count=30, name="Generated Loop", geometry=loaded)


def inspect_coordinates(track: Track):
    """Look up coordinates at a few distances."""
    print("\n" + "=" * 60)
    print("4. Coordinate Lookup")
    print("=" * 60)
    print()

    for fraction in (0.0, 0.25, 0.5, 0.75, 1.0):
        distance = fraction * track.length_m
        x, y = track.coordinates_at(distance)
        print(f"   {distance:7.1f} m -> ({x:8.1f}, {y:8.1f})")


def main():
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("./track_data")

    geometry = generate_default_track()
    generate_proportions()
    track = save_and_load(geometry, output_dir)
    inspect_coordinates(track)

    print("\n" + "=" * 60)
    print("Track generation examples complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
