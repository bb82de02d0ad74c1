"""Sampler configuration.

Connection settings follow the usual REDIS_* environment variables, so the
same environment that configures an application can be used to sample its
database:

    REDIS_HOST, REDIS_PORT, REDIS_DB, REDIS_PASSWORD, REDIS_SOCKET_TIMEOUT
    RS_SAMPLE_SIZE: default number of keys to sample
    RS_EXPORT_DIR: directory for CSV and chart output (disabled if unset)
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from redissampler.errors import ConfigurationError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6379
DEFAULT_DB = 0
DEFAULT_SAMPLE_SIZE = 10_000

# field -> (environment variable, parser)
_ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "host": ("REDIS_HOST", str),
    "port": ("REDIS_PORT", int),
    "db": ("REDIS_DB", int),
    "password": ("REDIS_PASSWORD", str),
    "socket_timeout": ("REDIS_SOCKET_TIMEOUT", float),
    "sample_size": ("RS_SAMPLE_SIZE", int),
    "export_dir": ("RS_EXPORT_DIR", Path),
}


@dataclass(frozen=True)
class SamplerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    db: int = DEFAULT_DB
    sample_size: int = DEFAULT_SAMPLE_SIZE
    password: str | None = None
    socket_timeout: float | None = None
    export_dir: Path | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> SamplerConfig:
        """Build a config from the environment; keyword overrides win.

        A variable is only read when its field has no override, so a stray
        or malformed value for an overridden field is ignored.

        Raises:
            ConfigurationError: If a variable that is read does not parse,
                or the result is invalid.
        """
        values = {name: value for name, value in overrides.items() if value is not None}
        for name, (variable, parse) in _ENV_FIELDS.items():
            if name in values:
                continue
            raw = os.getenv(variable)
            if not raw:
                continue
            try:
                values[name] = parse(raw)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid environment setting {variable}={raw!r}: {exc}") from exc

        config = cls(**values)
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError if any field is out of range."""
        if self.sample_size <= 0:
            raise ConfigurationError(f"sample_size must be positive, got {self.sample_size}")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"port must be in 1..65535, got {self.port}")
        if self.db < 0:
            raise ConfigurationError(f"db must be non-negative, got {self.db}")
        if self.socket_timeout is not None and self.socket_timeout <= 0:
            raise ConfigurationError(f"socket_timeout must be positive, got {self.socket_timeout}")
