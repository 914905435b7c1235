"""Configuration package exports."""
from .models import (
    AppConfig,
    BuildSettings,
    DeploySettings,
    IdentitySettings,
    NetworkSettings,
    OptimizeSettings,
    OutputSettings,
    ToolRequirement,
)

__all__ = [
    "AppConfig",
    "BuildSettings",
    "DeploySettings",
    "IdentitySettings",
    "NetworkSettings",
    "OptimizeSettings",
    "OutputSettings",
    "ToolRequirement",
]
