"""Model slots and the phase → slot routing used by the session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, get_args

from .typing import ModelKey

PHASE_SLOTS: Dict[str, ModelKey] = {
    "plan": "reason",
    "modulate": "base",
    "image": "base",
    "synthesize": "chat",
}


@dataclass(frozen=True, slots=True)
class ModelSpec:
    """One configured model id bound to a slot."""

    key: ModelKey
    model_id: str


class ModelRegistry:
    def __init__(self, specs: Iterable[ModelSpec] = ()) -> None:
        self._by_slot: Dict[ModelKey, ModelSpec] = {spec.key: spec for spec in specs}

    def get(self, key: ModelKey) -> ModelSpec:
        try:
            return self._by_slot[key]
        except KeyError:
            raise KeyError(f"No model configured for slot '{key}'") from None

    def prefer(self, *, phase: str) -> ModelSpec:
        """Return the spec serving ``phase``; unknown phases use the base slot."""
        return self.get(PHASE_SLOTS.get(phase, "base"))


def build_default_registry(model_configs: Mapping[str, Mapping[str, object]]) -> ModelRegistry:
    """Build the three-slot registry from resolved configs (``id`` per slot)."""
    return ModelRegistry(ModelSpec(key=key, model_id=str(model_configs[key]["id"])) for key in get_args(ModelKey))
