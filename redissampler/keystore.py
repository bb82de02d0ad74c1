"""Read-only access to the key-value store being sampled.

The sampler only talks to the store through the KeyStoreClient protocol, so
any object with these methods can stand in for a real server.
RedisKeyStoreClient is the production implementation on top of redis-py.

All values come back as raw bytes (the connection is opened with
``decode_responses=False``) so sizes are byte lengths.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import redis

from redissampler.errors import ConnectionFailure, EmptyStoreError, QueryError

if TYPE_CHECKING:
    from redissampler.config import SamplerConfig

logger = logging.getLogger(__name__)


class Probe(Enum):
    """Point queries that can be batched against a single key."""

    TYPE = "type"
    TTL = "ttl"
    ZCARD = "zcard"
    ZFIRST = "zfirst"  # lowest-score member, or None
    SCARD = "scard"
    SRANDMEMBER = "srandmember"
    LLEN = "llen"
    LFIRST = "lfirst"  # head of the list, or None


@runtime_checkable
class KeyStoreClient(Protocol):
    """Capabilities the sampler needs from a store. None of them mutate state."""

    def random_key(self) -> bytes:
        """Return a random key. Raises EmptyStoreError when there are none."""
        ...

    def batch(self, key: bytes, probes: Sequence[Probe]) -> list[Any]:
        """Run ``probes`` against ``key`` in one round trip, results in order."""
        ...

    def field_count(self, key: bytes) -> int: ...

    def field_names(self, key: bytes) -> list[bytes]: ...

    def field_value(self, key: bytes, field: bytes) -> bytes | None: ...

    def string_length(self, key: bytes) -> int: ...


@contextlib.contextmanager
def _translate_errors(command: str) -> Iterator[None]:
    """Re-raise redis-py failures as SamplerError subclasses."""
    try:
        yield
    except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as exc:
        raise ConnectionFailure(f"{command} failed: {exc}") from exc
    except redis.exceptions.RedisError as exc:
        raise QueryError(f"{command} failed: {exc}") from exc


def _first(values: list[bytes]) -> bytes | None:
    return values[0] if values else None


def _decode_type(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("ascii", errors="replace")
    return value


class RedisKeyStoreClient:
    """KeyStoreClient backed by a ``redis.Redis`` connection.

    Batched probes are sent as a non-transactional pipeline: the commands are
    issued together in one round trip but not wrapped in MULTI/EXEC.

    Args:
        client: A redis-py client. It must not decode responses.

    Example:
        with RedisKeyStoreClient.from_config(config) as store:
            tables = Sampler(store, config.sample_size).sample()
    """

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_config(cls, config: SamplerConfig) -> RedisKeyStoreClient:
        """Open a connection to the server described by ``config``."""
        client = redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            password=config.password,
            socket_timeout=config.socket_timeout,
            decode_responses=False,
        )
        logger.debug("Connecting to %s:%d db=%d", config.host, config.port, config.db)
        return cls(client)

    @property
    def client(self) -> redis.Redis:
        return self._client

    def random_key(self) -> bytes:
        with _translate_errors("RANDOMKEY"):
            key = self._client.randomkey()
        if key is None:
            raise EmptyStoreError("no keys to sample: the database is empty")
        return key

    def batch(self, key: bytes, probes: Sequence[Probe]) -> list[Any]:
        pipe = self._client.pipeline(transaction=False)
        for probe in probes:
            if probe is Probe.TYPE:
                pipe.type(key)
            elif probe is Probe.TTL:
                pipe.ttl(key)
            elif probe is Probe.ZCARD:
                pipe.zcard(key)
            elif probe is Probe.ZFIRST:
                pipe.zrange(key, 0, 0)
            elif probe is Probe.SCARD:
                pipe.scard(key)
            elif probe is Probe.SRANDMEMBER:
                pipe.srandmember(key)
            elif probe is Probe.LLEN:
                pipe.llen(key)
            elif probe is Probe.LFIRST:
                pipe.lrange(key, 0, 0)
            else:
                raise ValueError(f"Unsupported probe: {probe!r}")

        with _translate_errors(" + ".join(p.name for p in probes)):
            raw = pipe.execute()

        results: list[Any] = []
        for probe, value in zip(probes, raw):
            if probe is Probe.TYPE:
                value = _decode_type(value)
            elif probe in (Probe.ZFIRST, Probe.LFIRST):
                value = _first(value)
            results.append(value)
        return results

    def field_count(self, key: bytes) -> int:
        with _translate_errors("HLEN"):
            return self._client.hlen(key)

    def field_names(self, key: bytes) -> list[bytes]:
        with _translate_errors("HKEYS"):
            return self._client.hkeys(key)

    def field_value(self, key: bytes, field: bytes) -> bytes | None:
        with _translate_errors("HGET"):
            return self._client.hget(key, field)

    def string_length(self, key: bytes) -> int:
        with _translate_errors("STRLEN"):
            return self._client.strlen(key)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RedisKeyStoreClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
