"""
Viewer module - Live race rendering.

This module contains:
- RaceViewer: matplotlib window drawing track and vehicle positions
"""

from gridsim.viewer.renderer import MAX_UPDATE_RATE_HZ, RaceViewer

__all__ = [
    "MAX_UPDATE_RATE_HZ",
    "RaceViewer",
]
