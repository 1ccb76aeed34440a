"""Runtime assembly exports."""

from .app import build_application
from .model_resolver import build_model_resolver, resolve_model_configs

__all__ = ["build_application", "build_model_resolver", "resolve_model_configs"]
