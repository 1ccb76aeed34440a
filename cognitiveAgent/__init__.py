"""Cognitive-task orchestrator: plan, review, execute and synthesize."""

from .runtime.app import build_application
from .session.orchestrator import CognitiveOrchestrator

__all__ = ["build_application", "CognitiveOrchestrator"]
