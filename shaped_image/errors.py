from __future__ import annotations


class InputContractViolation(ValueError):
    """Caller supplied inputs outside the synthesis contract (for example a negative size)."""


class EnvironmentFailure(RuntimeError):
    """The rendering surface could not be created or did not produce a raster."""
