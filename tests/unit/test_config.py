"""Tests for SamplerConfig."""

from pathlib import Path

import pytest

from redissampler.config import DEFAULT_SAMPLE_SIZE, SamplerConfig
from redissampler.errors import ConfigurationError

ENV_VARS = [
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DB",
    "REDIS_PASSWORD",
    "REDIS_SOCKET_TIMEOUT",
    "RS_SAMPLE_SIZE",
    "RS_EXPORT_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        config = SamplerConfig.from_env()

        assert config.host == "localhost"
        assert config.port == 6379
        assert config.db == 0
        assert config.sample_size == DEFAULT_SAMPLE_SIZE
        assert config.password is None
        assert config.socket_timeout is None
        assert config.export_dir is None


class TestFromEnv:
    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REDIS_HOST", "cache")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("REDIS_DB", "2")
        monkeypatch.setenv("REDIS_PASSWORD", "secret")
        monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "1.5")
        monkeypatch.setenv("RS_SAMPLE_SIZE", "500")
        monkeypatch.setenv("RS_EXPORT_DIR", str(tmp_path))

        config = SamplerConfig.from_env()

        assert config == SamplerConfig(
            host="cache",
            port=6380,
            db=2,
            sample_size=500,
            password="secret",
            socket_timeout=1.5,
            export_dir=Path(tmp_path),
        )

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("REDIS_HOST", "cache")
        monkeypatch.setenv("REDIS_DB", "2")

        config = SamplerConfig.from_env(host="other", db=5, sample_size=10)

        assert config.host == "other"
        assert config.db == 5
        assert config.sample_size == 10

    def test_none_overrides_are_ignored(self, monkeypatch):
        monkeypatch.setenv("REDIS_HOST", "cache")

        assert SamplerConfig.from_env(host=None).host == "cache"

    def test_unparseable_value(self, monkeypatch):
        monkeypatch.setenv("REDIS_PORT", "not-a-port")

        with pytest.raises(ConfigurationError, match="REDIS_PORT"):
            SamplerConfig.from_env()

    def test_overridden_variables_are_not_parsed(self, monkeypatch):
        """Service-link style values are ignored for fields given explicitly."""
        monkeypatch.setenv("REDIS_PORT", "tcp://10.0.0.5:6379")
        monkeypatch.setenv("RS_SAMPLE_SIZE", "lots")

        config = SamplerConfig.from_env(port=6379, sample_size=5)

        assert config.port == 6379
        assert config.sample_size == 5

    def test_none_override_still_parses_variable(self, monkeypatch):
        monkeypatch.setenv("REDIS_PORT", "tcp://10.0.0.5:6379")

        with pytest.raises(ConfigurationError, match="REDIS_PORT"):
            SamplerConfig.from_env(port=None)

    def test_empty_variables_use_defaults(self, monkeypatch):
        monkeypatch.setenv("REDIS_PORT", "")
        monkeypatch.setenv("RS_EXPORT_DIR", "")

        config = SamplerConfig.from_env()

        assert config.port == 6379
        assert config.export_dir is None


class TestValidate:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sample_size": 0},
            {"port": 0},
            {"port": 70000},
            {"db": -1},
            {"socket_timeout": 0},
        ],
    )
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ConfigurationError):
            SamplerConfig(**kwargs).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SamplerConfig(sample_size=-5).validate()
