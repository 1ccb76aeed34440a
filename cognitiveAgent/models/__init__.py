"""Model registry exports."""

from .registry import ModelRegistry, ModelSpec, build_default_registry
from .typing import ModelKey, Phase

__all__ = ["ModelRegistry", "ModelSpec", "build_default_registry", "ModelKey", "Phase"]
