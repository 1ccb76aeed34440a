"""Environment-bound configuration objects.

Pydantic BaseSettings groups loaded from the process environment and ``.env``.
Alternative variable names are accepted through ``AliasChoices``.

Example:
    from cognitiveAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    planner_model = settings.models.reason
    max_steps = settings.governance.max_plan_steps
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


def _slot_aliases(slot: str, suffix: str, *fallbacks: str) -> AliasChoices:
    """``MODEL_<SLOT>_<SUFFIX>`` first, then any shared fallbacks (e.g. OPENAI_API_KEY)."""
    return AliasChoices(f"MODEL_{slot}_{suffix}", *fallbacks)


class ModelRoutingSettings(BaseSettings):
    """Model id and credentials for each slot.

    - base: small structured calls (context modulation, image scoring)
    - reason: plan generation and plan revision
    - chat: streamed answer synthesis

    Keys and base URLs fall back to ``OPENAI_API_KEY`` / ``OPENAI_BASE_URL`` so a
    single OpenAI-compatible endpoint can serve all three slots.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    base: str = Field(default="base-quick", validation_alias=_slot_aliases("BASE", "ID", "MODEL_BASE"))
    base_api_key: Optional[str] = Field(default=None, validation_alias=_slot_aliases("BASE", "API_KEY", "OPENAI_API_KEY"))
    base_base_url: Optional[str] = Field(default=None, validation_alias=_slot_aliases("BASE", "BASE_URL", "OPENAI_BASE_URL"))

    reason: str = Field(
        default="reasoner-pro", validation_alias=_slot_aliases("REASON", "ID", "MODEL_REASON", "MODEL_REASONING_ID")
    )
    reason_api_key: Optional[str] = Field(
        default=None, validation_alias=_slot_aliases("REASON", "API_KEY", "OPENAI_API_KEY")
    )
    reason_base_url: Optional[str] = Field(
        default=None, validation_alias=_slot_aliases("REASON", "BASE_URL", "OPENAI_BASE_URL")
    )

    chat: str = Field(default="chat-mid", validation_alias=_slot_aliases("CHAT", "ID", "MODEL_CHAT"))
    chat_api_key: Optional[str] = Field(default=None, validation_alias=_slot_aliases("CHAT", "API_KEY", "OPENAI_API_KEY"))
    chat_base_url: Optional[str] = Field(default=None, validation_alias=_slot_aliases("CHAT", "BASE_URL", "OPENAI_BASE_URL"))


class GovernanceSettings(BaseSettings):
    """Runtime governance and control settings.

    - max_plan_steps: upper bound for planner output and for the add-step gate
    - sandbox_timeout: wall-clock seconds a code step may run
    - sandbox_memory_mb / sandbox_cpu_seconds: POSIX resource limits for the sandbox
    - allow_sandbox_network: leave sockets usable inside the sandbox (default: off)
    """

    max_plan_steps: int = Field(default=12, ge=1, le=50, alias="MAX_PLAN_STEPS")
    sandbox_timeout: float = Field(default=10.0, gt=0, le=300, alias="SANDBOX_TIMEOUT")
    sandbox_memory_mb: int = Field(default=512, ge=64, le=8192, alias="SANDBOX_MEMORY_MB")
    sandbox_cpu_seconds: int = Field(default=10, ge=1, le=300, alias="SANDBOX_CPU_SECONDS")
    allow_sandbox_network: bool = Field(default=False, alias="ALLOW_SANDBOX_NETWORK")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class SearchSettings(BaseSettings):
    """Google Custom Search configuration for the web-search tool."""

    google_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GOOGLE_SEARCH_API_KEY", "GOOGLE_API_KEY")
    )
    google_engine_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GOOGLE_SEARCH_ENGINE_ID", "GOOGLE_CSE_ID")
    )
    num_results: int = Field(default=5, ge=1, le=10, alias="SEARCH_NUM_RESULTS")
    timeout: float = Field(default=10.0, gt=0, le=120, alias="SEARCH_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ObservabilitySettings(BaseSettings):
    """Tracing, logging, and archive configuration.

    - LangSmith tracing (LANGCHAIN_TRACING_V2, LANGCHAIN_PROJECT, etc.)
    - Logging settings (LOG_PROMPT_MAX_LENGTH)
    - Archive location (ARCHIVE_DB_PATH for SQLite storage)
    """

    langsmith_project: Optional[str] = Field(default=None, alias="LANGCHAIN_PROJECT")
    langsmith_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LANGCHAIN_API_KEY", "LANGSMITH_API_KEY")
    )
    langsmith_endpoint: Optional[str] = Field(default=None, alias="LANGCHAIN_ENDPOINT")
    tracing_enabled: bool = Field(default=False, alias="LANGCHAIN_TRACING_V2")

    log_prompt_max_length: int = Field(default=500, ge=100, le=5000, alias="LOG_PROMPT_MAX_LENGTH")

    # Unset or empty keeps archived turns in memory only
    archive_db_path: Optional[str] = Field(default=None, alias="ARCHIVE_DB_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Root application settings.

    Groups:
    - models: Model routing and API credentials (ModelRoutingSettings)
    - governance: Plan and sandbox limits (GovernanceSettings)
    - search: Web search backend (SearchSettings)
    - observability: Tracing, logging and archive (ObservabilitySettings)

    Use get_settings() to obtain a cached singleton instance.
    """

    models: ModelRoutingSettings = Field(default_factory=ModelRoutingSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()
