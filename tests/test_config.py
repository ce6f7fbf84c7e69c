"""Tests for configuration loading."""

from pathlib import Path

from talk_analytics.config import DEFAULT_LLM_ENDPOINT, Settings


def _settings(**overrides) -> Settings:
    values = {
        "analytics_llm_endpoint": "",
        "analytics_llm_api_key": "",
        "anthropic_base_url": "",
        "anthropic_auth_token": "",
        "analytics_llm_mode": "auto",
        "claude_dir": None,
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:
    def test_defaults(self):
        settings = _settings()
        assert settings.analytics_llm_mode == "auto"
        assert settings.analytics_llm_max_sentences == 500
        assert settings.analytics_llm_max_tokens == 1024
        assert settings.client_max_retries == 1
        assert settings.hourly_lookback_days == 120
        assert settings.hourly_max_history_records == 20000
        assert settings.heatmap_days == 365
        assert settings.concept_min_occurrences == 2
        assert settings.concept_max_concepts == 50
        assert settings.concept_spacy_model == "en_core_web_sm"
        assert settings.word_min_frequency == 2
        assert settings.report_version == "1.0.0"
        assert settings.analytics_llm_cache_path is None
        assert settings.analytics_llm_fixture.as_posix().endswith(
            "tests/fixtures/llm/sentence-insights.mock.json"
        )
        assert settings.resolved_llm_endpoint() == DEFAULT_LLM_ENDPOINT
        assert settings.resolved_llm_api_key() == ""
        assert settings.resolved_llm_key_source() == "none"
        assert settings.resolved_history_path() is None

    def test_unknown_mode_resolves_to_auto(self):
        assert _settings(analytics_llm_mode="LIVE").analytics_llm_mode == "live"
        assert _settings(analytics_llm_mode="sometimes").analytics_llm_mode == "auto"
        assert _settings(analytics_llm_mode=None).analytics_llm_mode == "auto"

    def test_from_yaml_missing_file(self, tmp_path):
        settings = Settings.from_yaml(
            tmp_path / "nonexistent.yaml",
            analytics_llm_api_key="",
            anthropic_auth_token="",
        )
        assert settings.heatmap_days == 365

    def test_from_yaml_with_overrides(self, tmp_path):
        config_file = tmp_path / "test.yaml"
        config_file.write_text("heatmap_days: 90\nword_max_words: 20\n")
        settings = Settings.from_yaml(config_file, word_max_words=40)
        assert settings.heatmap_days == 90
        assert settings.word_max_words == 40

    def test_analytics_credentials_take_precedence(self):
        settings = _settings(
            analytics_llm_endpoint="https://analytics.example/v1/messages",
            analytics_llm_api_key="analytics-key",
            anthropic_base_url="https://proxy.example/v1/messages",
            anthropic_auth_token="generic-token",
        )
        assert settings.resolved_llm_endpoint() == "https://analytics.example/v1/messages"
        assert settings.resolved_llm_api_key() == "analytics-key"
        assert settings.resolved_llm_key_source() == "ANALYTICS_LLM_API_KEY"

    def test_generic_anthropic_credentials_are_fallback(self):
        settings = _settings(
            anthropic_base_url="https://proxy.example/v1/messages",
            anthropic_auth_token="generic-token",
        )
        assert settings.resolved_llm_endpoint() == "https://proxy.example/v1/messages"
        assert settings.resolved_llm_api_key() == "generic-token"
        assert settings.resolved_llm_key_source() == "ANTHROPIC_AUTH_TOKEN"

    def test_history_path_joins_claude_dir(self, tmp_path):
        settings = _settings(claude_dir=tmp_path)
        assert settings.resolved_history_path() == Path(tmp_path) / "history.jsonl"
