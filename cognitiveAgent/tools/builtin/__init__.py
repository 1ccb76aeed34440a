"""Built-in handlers, one per tool kind."""

from .code_sandbox import SandboxLimits, build_sandbox_handler, run_sandboxed
from .context_modulation import build_context_modulation_handler
from .final_synthesis import final_synthesis_handler
from .image_analysis import image_analysis_handler
from .image_synthesis import ImageScores, build_image_synthesis_handler
from .web_search import build_web_search_handler, search_web

__all__ = [
    "SandboxLimits",
    "build_sandbox_handler",
    "run_sandboxed",
    "build_context_modulation_handler",
    "final_synthesis_handler",
    "image_analysis_handler",
    "ImageScores",
    "build_image_synthesis_handler",
    "build_web_search_handler",
    "search_web",
]
