"""Settings → ChatOpenAI clients for the three model slots.

Tests never reach this module; they hand ``build_application`` a resolver
backed by fake chat models.
"""

from __future__ import annotations

from typing import Dict, Optional, TypedDict

from langchain_openai import ChatOpenAI

from cognitiveAgent.agents import ModelResolver
from cognitiveAgent.config import Settings

SLOTS = ("base", "reason", "chat")


class ModelConfig(TypedDict):
    id: str
    api_key: Optional[str]
    base_url: Optional[str]


def resolve_model_configs(settings: Settings) -> Dict[str, ModelConfig]:
    """Collect id and credentials for each slot."""
    models = settings.models
    return {
        slot: ModelConfig(
            id=getattr(models, slot),
            api_key=getattr(models, f"{slot}_api_key"),
            base_url=getattr(models, f"{slot}_base_url"),
        )
        for slot in SLOTS
    }


def _client_for(config: ModelConfig) -> ChatOpenAI:
    if not config["api_key"]:
        raise RuntimeError(f"Missing API key for model {config['id']}; configure it in .env")
    kwargs: Dict[str, object] = {"model": config["id"], "api_key": config["api_key"], "temperature": 0.2}
    if config["base_url"]:
        kwargs["base_url"] = config["base_url"]
    return ChatOpenAI(**kwargs)


def build_model_resolver(model_configs: Dict[str, ModelConfig]) -> ModelResolver:
    """Return a resolver creating one client per model id on first use.

    Raises (from the resolver):
        KeyError: the model id belongs to no configured slot
        RuntimeError: the slot has no API key
    """
    configs = {config["id"]: config for config in model_configs.values()}
    clients: Dict[str, ChatOpenAI] = {}

    def resolver(model_id: str) -> ChatOpenAI:
        if model_id not in configs:
            raise KeyError(f"Model {model_id} is not registered in the configuration")
        if model_id not in clients:
            clients[model_id] = _client_for(configs[model_id])
        return clients[model_id]

    return resolver
