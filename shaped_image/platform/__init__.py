"""Platform collaborators for pixel density lookup."""

from .scale import (
    DEFAULT_SCALE_ENV_VAR,
    DefaultScaleProvider,
    EnvScaleProvider,
    FixedScaleProvider,
    ScreenScaleProvider,
    default_scale_provider,
)

__all__ = [
    "DEFAULT_SCALE_ENV_VAR",
    "DefaultScaleProvider",
    "EnvScaleProvider",
    "FixedScaleProvider",
    "ScreenScaleProvider",
    "default_scale_provider",
]
