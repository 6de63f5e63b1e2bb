"""Exceptions raised for contract violations (bad tables, bad markup, reused surfaces)."""


class SnowfallError(Exception):
    """Base class for all Snowfall errors."""


class SeasonTableError(SnowfallError, ValueError):
    """Season ranges do not partition the year."""


class SurfaceTransferredError(SnowfallError, RuntimeError):
    """Rendering surface was already handed off to the worker."""


class MissingControlError(SnowfallError, KeyError):
    """Toggle markup has no control for a preference value."""
