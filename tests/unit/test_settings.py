"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from cognitiveAgent.config.settings import GovernanceSettings, ModelRoutingSettings, SearchSettings
from cognitiveAgent.models import build_default_registry
from cognitiveAgent.runtime.model_resolver import build_model_resolver


class TestGovernanceSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MAX_PLAN_STEPS", raising=False)
        settings = GovernanceSettings(_env_file=None)
        assert settings.max_plan_steps == 12
        assert settings.allow_sandbox_network is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_PLAN_STEPS", "4")
        monkeypatch.setenv("SANDBOX_TIMEOUT", "2.5")
        settings = GovernanceSettings(_env_file=None)
        assert settings.max_plan_steps == 4
        assert settings.sandbox_timeout == 2.5

    def test_bounds(self):
        with pytest.raises(ValidationError):
            GovernanceSettings(max_plan_steps=0, _env_file=None)


class TestModelRoutingSettings:
    def test_alias_choices(self, monkeypatch):
        monkeypatch.setenv("MODEL_REASONING_ID", "my-reasoner")
        monkeypatch.setenv("MODEL_REASON_API_KEY", "secret")
        settings = ModelRoutingSettings(_env_file=None)
        assert settings.reason == "my-reasoner"
        assert settings.reason_api_key == "secret"


class TestSearchSettings:
    def test_alias_choices(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_CSE_ID", "engine")
        assert SearchSettings(_env_file=None).google_engine_id == "engine"


class TestModelRouting:
    CONFIGS = {
        "base": {"id": "b", "api_key": "k", "base_url": None},
        "reason": {"id": "r", "api_key": None, "base_url": None},
        "chat": {"id": "c", "api_key": "k", "base_url": "http://localhost:1"},
    }

    def test_phase_slots(self):
        registry = build_default_registry(self.CONFIGS)
        assert registry.prefer(phase="plan").model_id == "r"
        assert registry.prefer(phase="synthesize").model_id == "c"
        assert registry.prefer(phase="modulate").model_id == "b"
        assert registry.prefer(phase="unknown").model_id == "b"

    def test_resolver_rejects_unknown_model(self):
        resolver = build_model_resolver(self.CONFIGS)
        with pytest.raises(KeyError):
            resolver("nope")

    def test_resolver_requires_api_key(self):
        resolver = build_model_resolver(self.CONFIGS)
        with pytest.raises(RuntimeError, match="Missing API key"):
            resolver("r")
