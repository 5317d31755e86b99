"""Tests for environment configuration."""

import pytest

from finance_mcp.config import DEFAULT_ALPHA_VANTAGE_URL, Settings
from finance_mcp.errors import ConfigurationError


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.calls_per_minute == 5.0
        assert settings.min_request_interval == 12.0
        assert settings.max_attempts == 4
        assert settings.retry_delay == 2.0
        assert settings.quote_ttl == 300.0
        assert settings.news_ttl == 900.0
        assert settings.alpha_vantage_base_url == DEFAULT_ALPHA_VANTAGE_URL

    def test_unlimited_rate_has_no_interval(self) -> None:
        assert Settings(calls_per_minute=0).min_request_interval == 0.0

    def test_missing_keys_raise_on_require(self) -> None:
        settings = Settings()
        with pytest.raises(ConfigurationError, match="ALPHA_VANTAGE_API_KEY"):
            settings.require_alpha_vantage_key()
        with pytest.raises(ConfigurationError, match="NEWS_API_KEY"):
            settings.require_news_api_key()

    def test_require_returns_key(self) -> None:
        assert Settings(alpha_vantage_api_key="k").require_alpha_vantage_key() == "k"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_attempts": 0},
            {"max_workers": 0},
            {"sentiment_normalization": 0},
            {"cache_max_entries": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ConfigurationError):
            Settings(**overrides)


class TestFromEnv:
    """Tests for Settings.from_env."""

    def test_empty_environment_uses_defaults(self) -> None:
        assert Settings.from_env({}) == Settings()

    def test_reads_keys_and_numbers(self) -> None:
        settings = Settings.from_env({
            "ALPHA_VANTAGE_API_KEY": "av",
            "NEWS_API_KEY": "nk",
            "AV_CALLS_PER_MINUTE": "75",
            "FETCH_MAX_ATTEMPTS": "2",
            "CACHE_TTL_NEWS": "60",
            "SENTIMENT_THRESHOLD": "0.3",
        })
        assert settings.alpha_vantage_api_key == "av"
        assert settings.news_api_key == "nk"
        assert settings.min_request_interval == pytest.approx(0.8)
        assert settings.max_attempts == 2
        assert settings.news_ttl == 60.0
        assert settings.sentiment_threshold == 0.3

    def test_blank_key_is_missing(self) -> None:
        assert Settings.from_env({"ALPHA_VANTAGE_API_KEY": ""}).alpha_vantage_api_key is None

    def test_blank_number_uses_default(self) -> None:
        assert Settings.from_env({"REQUEST_TIMEOUT": " "}).request_timeout == 10.0

    def test_unparseable_number(self) -> None:
        with pytest.raises(ConfigurationError, match="FETCH_RETRY_DELAY must be a number"):
            Settings.from_env({"FETCH_RETRY_DELAY": "soon"})

    def test_unparseable_integer(self) -> None:
        with pytest.raises(ConfigurationError, match="FETCH_MAX_WORKERS must be an integer"):
            Settings.from_env({"FETCH_MAX_WORKERS": "2.5"})

    def test_reads_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEWS_API_KEY", "from-env")
        assert Settings.from_env().news_api_key == "from-env"
