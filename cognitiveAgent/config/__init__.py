"""Configuration exports."""

from .settings import (
    GovernanceSettings,
    ModelRoutingSettings,
    ObservabilitySettings,
    SearchSettings,
    Settings,
    get_settings,
)

__all__ = [
    "GovernanceSettings",
    "ModelRoutingSettings",
    "ObservabilitySettings",
    "SearchSettings",
    "Settings",
    "get_settings",
]
