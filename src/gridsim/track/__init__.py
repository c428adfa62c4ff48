"""
Track module - Track record and centerline geometry.

This module contains:
- Track: Length, lap count and optional geometry
- TrackGeometry: Sampled centerline with continuous coordinate lookup
- TrackGenerator / generate_closed_loop: Synthetic closed-loop centerlines
- load_track_csv / save_track_csv: Track file I/O
"""

from gridsim.track.geometry import TrackGeometry, load_track_csv, save_track_csv
from gridsim.track.track import Track
from gridsim.track.generator import TrackGenerator, GeneratorConfig, generate_closed_loop

__all__ = [
    "Track",
    "TrackGeometry",
    "TrackGenerator",
    "GeneratorConfig",
    "generate_closed_loop",
    "load_track_csv",
    "save_track_csv",
]
