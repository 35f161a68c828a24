"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from ratelimiter.core.config import LogSettings, RateLimitSettings, ServerSettings, StoreSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RATELIMIT",
        "RATELIMIT_DEFAULT_LIMIT",
        "RATELIMIT_CLEANUP_INTERVAL",
        "RATELIMIT_BLOCK_TIME",
        "RATELIMIT_TOKEN_LIST",
        "RATELIMIT_STORE_BACKEND",
        "RATELIMIT_REDIS_URL",
        "RATELIMIT_REDIS_DB",
    ):
        monkeypatch.delenv(name, raising=False)


class TestRateLimitSettings:
    def test_defaults(self) -> None:
        cfg = RateLimitSettings()

        assert cfg.enabled is True
        assert cfg.default_limit == 10
        assert cfg.cleanup_interval_seconds == 0
        assert cfg.block_duration_seconds == 300
        assert cfg.token_list == ""
        assert cfg.token_header == "API_KEY"

    def test_reads_deployment_variable_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATELIMIT", "7")
        monkeypatch.setenv("RATELIMIT_CLEANUP_INTERVAL", "60000")
        monkeypatch.setenv("RATELIMIT_BLOCK_TIME", "1500")
        monkeypatch.setenv("RATELIMIT_TOKEN_LIST", "50,100")

        cfg = RateLimitSettings()

        assert cfg.default_limit == 7
        assert cfg.cleanup_interval_seconds == 60
        assert cfg.block_duration_seconds == 1.5
        assert cfg.token_list == "50,100"

    @pytest.mark.parametrize(
        "name, value",
        [
            ("RATELIMIT", "0"),
            ("RATELIMIT", "abc"),
            ("RATELIMIT_BLOCK_TIME", "-1"),
            ("RATELIMIT_CLEANUP_INTERVAL", "soon"),
        ],
    )
    def test_invalid_values_fail_fast(self, monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            RateLimitSettings()


class TestStoreSettings:
    def test_defaults(self) -> None:
        cfg = StoreSettings()

        assert cfg.store_backend == "redis"
        assert cfg.redis_url == "localhost:6379"
        assert cfg.redis_password is None
        assert cfg.redis_db == 0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATELIMIT_REDIS_URL", "redis:6379")
        monkeypatch.setenv("RATELIMIT_REDIS_DB", "4")

        cfg = StoreSettings()

        assert cfg.redis_url == "redis:6379"
        assert cfg.redis_db == 4

    def test_invalid_db_fails_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATELIMIT_REDIS_DB", "primary")

        with pytest.raises(ValidationError):
            StoreSettings()


def test_server_and_log_defaults() -> None:
    assert ServerSettings().port == 8080
    assert LogSettings().request_id_header == "X-Request-ID"
