"""Backend call helpers shared by the planner, tools and synthesizer."""

from .factory import invoke_structured, stream_completion
from .interfaces import ModelResolver

__all__ = ["invoke_structured", "stream_completion", "ModelResolver"]
