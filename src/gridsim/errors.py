"""Exceptions raised by the race simulator."""


class GridSimError(Exception):
    """Base exception for simulator errors."""


class ConfigurationError(GridSimError):
    """Raised when race parameters or run options are invalid."""


class TrackLoadError(GridSimError):
    """Raised when track geometry cannot be loaded or validated."""
