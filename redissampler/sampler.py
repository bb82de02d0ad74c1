"""Random-key sampler.

Each iteration draws one random key, records its type and TTL, then issues a
minimal per-type probe (one or two representative elements, never a full
scan) and records the results in the run's SampleTables.

Errors are not caught here. Any query failure aborts the run and its partial
tables are dropped; there are no retries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from redissampler.errors import ConfigurationError
from redissampler.frequency import UNKNOWN, Metric, SampleTables, key_prefix
from redissampler.keystore import KeyStoreClient, Probe

logger = logging.getLogger(__name__)

NO_EXPIRE_TTL = -1


class KeyType(Enum):
    """The value types the sampler knows how to inspect."""

    STRING = "string"
    LIST = "list"
    SET = "set"
    SORTED_SET = "zset"
    HASH = "hash"

    @classmethod
    def parse(cls, name: str) -> KeyType | None:
        """Map a TYPE reply to a KeyType, or None for anything else."""
        try:
            return cls(name)
        except ValueError:
            return None


def decode_key(key: bytes | str) -> str:
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="backslashreplace")
    return key


def normalize_ttl(ttl: int) -> int | str:
    """TTL bucket value: UNKNOWN for keys without expiry, the raw TTL otherwise."""
    return UNKNOWN if ttl == NO_EXPIRE_TTL else ttl


class Sampler:
    """Draws random keys from a store and builds per-prefix frequency tables.

    Args:
        client: Store to sample from.
        sample_size: Default number of keys drawn by sample(). Also used by
            the report's long-tail rule.

    Example:
        sampler = Sampler(store, sample_size=10_000)
        tables = sampler.sample()
        report = build_report(tables, sampler.sample_size)
    """

    def __init__(self, client: KeyStoreClient, sample_size: int):
        if sample_size <= 0:
            raise ConfigurationError(f"sample_size must be positive, got {sample_size}")
        self._client = client
        self._sample_size = sample_size
        self._tables = SampleTables()
        self._inspectors: dict[KeyType, Callable[[SampleTables, bytes, str], None]] = {
            KeyType.SORTED_SET: self._inspect_sorted_set,
            KeyType.SET: self._inspect_set,
            KeyType.LIST: self._inspect_list,
            KeyType.HASH: self._inspect_hash,
            KeyType.STRING: self._inspect_string,
        }

    @property
    def sample_size(self) -> int:
        return self._sample_size

    @property
    def tables(self) -> SampleTables:
        return self._tables

    def sample(self, count: int | None = None) -> SampleTables:
        """Sample exactly ``count`` random keys (default: sample_size).

        Every call starts from empty tables. They replace ``tables`` only
        once the whole run has succeeded.

        Returns:
            The SampleTables built by this run.

        Raises:
            EmptyStoreError: If the store has no keys.
            ConnectionFailure: On transport errors.
            QueryError: If the store rejects a probe.
        """
        count = self._sample_size if count is None else count
        if count < 0:
            raise ConfigurationError(f"count must be non-negative, got {count}")

        logger.info("Sampling %d random keys", count)
        tables = SampleTables()
        for _ in range(count):
            self._sample_one(tables)
        self._tables = tables
        logger.info("Sampled %d keys across %d prefixes", count, len(tables[Metric.TYPE]))
        return tables

    def _sample_one(self, tables: SampleTables) -> None:
        key = self._client.random_key()
        prefix = key_prefix(decode_key(key))
        type_name, ttl = self._client.batch(key, [Probe.TYPE, Probe.TTL])

        tables.record(Metric.TYPE, prefix, type_name)
        tables.record(Metric.EXPIRATION, prefix, normalize_ttl(ttl))
        logger.debug("key=%r type=%s ttl=%s", key, type_name, ttl)

        key_type = KeyType.parse(type_name)
        if key_type is None:
            return
        self._inspectors[key_type](tables, key, prefix)

    @staticmethod
    def _record_collection(
        tables: SampleTables,
        prefix: str,
        size: int,
        element: bytes | None,
        size_metric: Metric,
        element_metric: Metric,
    ) -> None:
        if size != 0:
            tables.record(size_metric, prefix, size)
        if element is not None:
            tables.record(element_metric, prefix, len(element))

    def _inspect_sorted_set(self, tables: SampleTables, key: bytes, prefix: str) -> None:
        card, first = self._client.batch(key, [Probe.ZCARD, Probe.ZFIRST])
        self._record_collection(
            tables, prefix, card, first, Metric.ZSET_CARDINALITY, Metric.ZSET_ELEMENT_SIZE
        )

    def _inspect_set(self, tables: SampleTables, key: bytes, prefix: str) -> None:
        card, member = self._client.batch(key, [Probe.SCARD, Probe.SRANDMEMBER])
        self._record_collection(
            tables, prefix, card, member, Metric.SET_CARDINALITY, Metric.SET_ELEMENT_SIZE
        )

    def _inspect_list(self, tables: SampleTables, key: bytes, prefix: str) -> None:
        length, head = self._client.batch(key, [Probe.LLEN, Probe.LFIRST])
        self._record_collection(
            tables, prefix, length, head, Metric.LIST_LENGTH, Metric.LIST_ELEMENT_SIZE
        )

    def _inspect_hash(self, tables: SampleTables, key: bytes, prefix: str) -> None:
        length = self._client.field_count(key)
        if length < 1:
            tables.record(Metric.HASH_FIELD_SIZE, prefix, UNKNOWN)
            tables.record(Metric.HASH_VALUE_SIZE, prefix, UNKNOWN)
            return

        tables.record(Metric.HASH_LENGTH, prefix, length)
        fields = self._client.field_names(key)
        # The hash can be emptied between HLEN and HKEYS.
        if not fields:
            return
        field = fields[0]
        tables.record(Metric.HASH_FIELD_SIZE, prefix, len(field))
        value = self._client.field_value(key, field)
        if value is not None:
            tables.record(Metric.HASH_VALUE_SIZE, prefix, len(value))

    def _inspect_string(self, tables: SampleTables, key: bytes, prefix: str) -> None:
        # Zero-length strings are recorded too.
        tables.record(Metric.STRING_SIZE, prefix, self._client.string_length(key))
