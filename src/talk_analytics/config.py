"""Configuration management for the analytics pipeline."""

from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LLM_MODES = {"auto", "mock", "live"}
DEFAULT_LLM_ENDPOINT = "https://api.anthropic.com/v1/messages"


class Settings(BaseSettings):
    """Pipeline settings, loaded from env vars and optionally overridden by a YAML config file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sentence summary endpoint
    analytics_llm_endpoint: str = ""
    analytics_llm_api_key: str = ""
    anthropic_base_url: str = ""
    anthropic_auth_token: str = ""
    analytics_llm_model: str = "claude-3-5-sonnet-latest"
    analytics_llm_mode: str = "auto"
    analytics_llm_max_sentences: int = 500
    analytics_llm_max_tokens: int = 1024
    analytics_llm_timeout_seconds: float = 60.0
    analytics_llm_fixture: Path = Field(
        default=Path("tests/fixtures/llm/sentence-insights.mock.json")
    )
    analytics_llm_cache_path: Path | None = None
    client_max_retries: int = 1
    client_backoff_seconds: float = 1.0

    # Hourly activity
    claude_dir: Path | None = None
    history_filename: str = "history.jsonl"
    hourly_lookback_days: int = 120
    hourly_max_history_records: int = 20000
    hourly_timezone: str = ""

    # Report stages
    heatmap_days: int = 365
    concept_min_occurrences: int = 2
    concept_max_concepts: int = 50
    concept_spacy_model: str = "en_core_web_sm"
    word_min_frequency: int = 2
    word_max_words: int = 100
    report_version: str = "1.0.0"

    @field_validator("analytics_llm_mode", mode="before")
    @classmethod
    def _normalize_llm_mode(cls, value: object) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in SUPPORTED_LLM_MODES else "auto"

    @classmethod
    def from_yaml(cls, config_path: str | Path, **overrides) -> "Settings":
        """Load settings from a YAML config file, with env vars and overrides applied on top."""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_config = yaml.safe_load(f) or {}
        else:
            yaml_config = {}
        merged = {**yaml_config, **overrides}
        return cls(**merged)

    def resolved_llm_endpoint(self) -> str:
        """Resolve the messages endpoint, preferring the explicit analytics endpoint."""

        return (
            self.analytics_llm_endpoint.strip()
            or self.anthropic_base_url.strip()
            or DEFAULT_LLM_ENDPOINT
        )

    def resolved_llm_api_key(self) -> str:
        """Resolve API key, falling back to the generic Anthropic token."""

        return self.analytics_llm_api_key.strip() or self.anthropic_auth_token.strip()

    def resolved_llm_key_source(self) -> str:
        """Return non-secret key source label for diagnostics."""

        if self.analytics_llm_api_key.strip():
            return "ANALYTICS_LLM_API_KEY"
        if self.anthropic_auth_token.strip():
            return "ANTHROPIC_AUTH_TOKEN"
        return "none"

    def resolved_history_path(self) -> Path | None:
        """Resolve the history log path, or None when no assistant directory is configured."""

        if self.claude_dir is None:
            return None
        return self.claude_dir / self.history_filename
