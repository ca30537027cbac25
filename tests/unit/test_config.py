"""Unit tests for AMCConfig."""

from pydantic import ValidationError
import pytest

from wikidot_amc.config import AMCConfig


class TestAMCConfig:
    def test_defaults(self, monkeypatch):
        for name in ("TIMEOUT", "RETRY_LIMIT", "RETRY_INTERVAL", "SEMAPHORE_LIMIT", "DOMAIN"):
            monkeypatch.delenv(f"WIKIDOT_AMC_{name}", raising=False)

        config = AMCConfig(_env_file=None)

        assert config.timeout == 20.0
        assert config.retry_limit == 3
        assert config.retry_interval == 1.0
        assert config.backoff_factor == 2.0
        assert config.max_backoff == 60.0
        assert config.semaphore_limit == 10
        assert config.fallback_status_code == 999
        assert config.domain == "wikidot.com"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("WIKIDOT_AMC_RETRY_LIMIT", "5")
        monkeypatch.setenv("WIKIDOT_AMC_DOMAIN", "wikidot.example")

        config = AMCConfig(_env_file=None)

        assert config.retry_limit == 5
        assert config.domain == "wikidot.example"

    def test_keyword_arguments_beat_environment(self, monkeypatch):
        monkeypatch.setenv("WIKIDOT_AMC_RETRY_LIMIT", "5")
        assert AMCConfig(_env_file=None, retry_limit=2).retry_limit == 2

    @pytest.mark.parametrize(
        "overrides",
        [
            {"retry_limit": 0},
            {"semaphore_limit": 0},
            {"timeout": 0},
            {"backoff_factor": 0.5},
            {"retry_interval": 10.0, "max_backoff": 1.0},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            AMCConfig(_env_file=None, **overrides)

    def test_urls(self):
        config = AMCConfig(_env_file=None, domain="wikidot.com")

        assert config.base_url("scp-jp", True) == "https://scp-jp.wikidot.com"
        assert config.base_url("old", False) == "http://old.wikidot.com"
        assert config.amc_url("scp-jp", True) == "https://scp-jp.wikidot.com/ajax-module-connector.php"
