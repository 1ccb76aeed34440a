"""Telemetry exports."""

from .tracing import configure_tracing

__all__ = ["configure_tracing"]
