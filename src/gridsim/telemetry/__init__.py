"""
Telemetry module - Race data export.

This module contains:
- RaceExporter: CSV export of per-tick states, JSON export of results
"""

from gridsim.telemetry.exporter import ExporterConfig, NumpyEncoder, RaceExporter

__all__ = [
    "ExporterConfig",
    "NumpyEncoder",
    "RaceExporter",
]
