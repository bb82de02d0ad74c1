"""Per-prefix frequency tables filled in by the sampler.

A FrequencyTable maps a key prefix (the text before the first ``:``) to a
Counter of bucket values. Bucket values are type names, sizes, cardinalities,
TTLs, or the UNKNOWN sentinel. SampleTables bundles one FrequencyTable per
Metric and is the single aggregate handed from the Sampler to the Reporter.

Like the streaming sketches these tables are mergeable: combining two tables
sums their counts, as if every key had been sampled into one table.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterator, Mapping
from enum import Enum

UNKNOWN = "unknown"
"""Bucket value for "no measurable value" (no expiry, empty hash...)."""

PREFIX_SEPARATOR = ":"


class Metric(Enum):
    """The distributions tracked for every sampled key."""

    TYPE = "type"
    EXPIRATION = "expiration"
    ZSET_CARDINALITY = "zset_cardinality"
    ZSET_ELEMENT_SIZE = "zset_element_size"
    LIST_LENGTH = "list_length"
    LIST_ELEMENT_SIZE = "list_element_size"
    HASH_LENGTH = "hash_length"
    HASH_FIELD_SIZE = "hash_field_size"
    HASH_VALUE_SIZE = "hash_value_size"
    SET_CARDINALITY = "set_cardinality"
    SET_ELEMENT_SIZE = "set_element_size"
    STRING_SIZE = "string_size"


def key_prefix(key: str) -> str:
    """Return the namespace of ``key``: everything before the first ``:``.

    Keys without a separator are their own prefix.
    """
    return key.split(PREFIX_SEPARATOR, 1)[0]


class FrequencyTable:
    """Counts of bucket values, grouped by key prefix.

    Inner counters are only created through increment() or merge(), so every
    stored count is a positive integer.
    """

    def __init__(self) -> None:
        self._prefixes: dict[str, Counter] = {}

    def increment(self, prefix: str, bucket: Hashable, count: int = 1) -> None:
        """Add ``count`` occurrences of ``bucket`` under ``prefix``.

        Raises:
            ValueError: If count is not positive.
        """
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        counts = self._prefixes.get(prefix)
        if counts is None:
            counts = self._prefixes[prefix] = Counter()
        counts[bucket] += count

    def merge(self, other: FrequencyTable) -> None:
        """Fold another table's counts into this one.

        Raises:
            TypeError: If other is not a FrequencyTable.
        """
        if not isinstance(other, FrequencyTable):
            raise TypeError(f"Can only merge FrequencyTable, got {type(other).__name__}")
        for prefix, counts in other._prefixes.items():
            for bucket, count in counts.items():
                self.increment(prefix, bucket, count)

    def prefixes(self) -> list[str]:
        """Prefixes in first-seen order."""
        return list(self._prefixes)

    def items(self) -> Iterator[tuple[str, dict[Hashable, int]]]:
        """Iterate (prefix, counts) pairs; the counts are copies."""
        for prefix, counts in self._prefixes.items():
            yield prefix, dict(counts)

    def prefix_total(self, prefix: str) -> int:
        """Sum of all counts recorded under ``prefix`` (0 if unseen)."""
        counts = self._prefixes.get(prefix)
        return sum(counts.values()) if counts else 0

    def total(self) -> int:
        """Sum of all counts across all prefixes."""
        return sum(sum(counts.values()) for counts in self._prefixes.values())

    def clear(self) -> None:
        self._prefixes.clear()

    def to_dict(self) -> dict[str, dict[Hashable, int]]:
        return {prefix: dict(counts) for prefix, counts in self._prefixes.items()}

    def __getitem__(self, prefix: str) -> dict[Hashable, int]:
        return dict(self._prefixes[prefix])

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._prefixes

    def __len__(self) -> int:
        return len(self._prefixes)

    def __bool__(self) -> bool:
        return bool(self._prefixes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FrequencyTable):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"FrequencyTable({self.to_dict()!r})"


class SampleTables:
    """One FrequencyTable per Metric, owned by a single sampling run."""

    def __init__(self) -> None:
        self._tables: dict[Metric, FrequencyTable] = {metric: FrequencyTable() for metric in Metric}

    def __getitem__(self, metric: Metric) -> FrequencyTable:
        return self._tables[metric]

    def __iter__(self) -> Iterator[Metric]:
        return iter(self._tables)

    def record(self, metric: Metric, prefix: str, bucket: Hashable) -> None:
        """Count one occurrence of ``bucket`` for ``metric`` under ``prefix``."""
        self._tables[metric].increment(prefix, bucket)

    def merge(self, other: SampleTables) -> None:
        """Merge every table of ``other`` into the matching table here."""
        if not isinstance(other, SampleTables):
            raise TypeError(f"Can only merge SampleTables, got {type(other).__name__}")
        for metric, table in other._tables.items():
            self._tables[metric].merge(table)

    def clear(self) -> None:
        for table in self._tables.values():
            table.clear()

    def to_dict(self) -> dict[str, dict[str, dict[Hashable, int]]]:
        return {metric.value: table.to_dict() for metric, table in self._tables.items()}
