"""Derived views over completed frequency tables.

Everything here is a pure function of the tables: nothing talks to the
store and nothing mutates its input, so building a report twice from the same
tables gives identical results.

The long-tail rule keeps reports bounded when there are many distinct
prefixes or sizes: at least MIN_ROWS entries are always shown, after which
listing stops at the first entry below SUPPRESS_BELOW of the sample size. The
rest is summarized as a single suppressed remainder.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any

from redissampler.frequency import UNKNOWN, FrequencyTable, Metric, SampleTables

MIN_ROWS = 21
SUPPRESS_BELOW = 0.005

NO_EXPIRE_NOTE = "Note: 'unknown' expire means keys with no expire"


# =============================================================================
# Primitives
# =============================================================================


def sorted_descending(counts: Mapping[Hashable, int]) -> list[tuple[Hashable, int]]:
    """Entries ordered by count, highest first. Ties keep insertion order."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def percentage(value: float, total: float) -> str:
    """Format ``value`` as a percentage of ``total`` with two decimals."""
    return f"{value * 100 / total:.2f}%"


def power_of_two_bucket(n: float) -> int:
    """Smallest power of two that is >= n (1 for n <= 1)."""
    p = 1
    while n > p:
        p *= 2
    return p


def _numeric_items(counts: Mapping[Hashable, int]) -> list[tuple[float, int]]:
    return [
        (bucket, count)
        for bucket, count in counts.items()
        if bucket != UNKNOWN and isinstance(bucket, (int, float)) and not isinstance(bucket, bool)
    ]


def power_of_two_histogram(counts: Mapping[Hashable, int]) -> dict[str, int]:
    """Re-bucket numeric entries under ``"<= p"`` labels. UNKNOWN is dropped."""
    histogram: dict[str, int] = {}
    for bucket, count in _numeric_items(counts):
        label = f"<= {power_of_two_bucket(bucket)}"
        histogram[label] = histogram.get(label, 0) + count
    return histogram


@dataclass(frozen=True)
class Statistics:
    """Weighted summary of a numeric frequency table."""

    average: float = 0.0
    standard_deviation: float = 0.0
    min: float = 0
    max: float = 0

    def to_dict(self) -> dict[str, float]:
        return {
            "average": self.average,
            "standard_deviation": self.standard_deviation,
            "min": self.min,
            "max": self.max,
        }


def compute_statistics(counts: Mapping[Hashable, int]) -> Statistics:
    """Weighted mean, population standard deviation, min and max.

    Each bucket value is weighted by its count. UNKNOWN is ignored; a table
    with no numeric entries yields an all-zero Statistics.
    """
    items = _numeric_items(counts)
    weight = sum(count for _, count in items)
    if weight == 0:
        return Statistics()

    average = sum(bucket * count for bucket, count in items) / weight
    variance = sum(((bucket - average) ** 2) * count for bucket, count in items) / weight
    values = [bucket for bucket, _ in items]
    return Statistics(
        average=average,
        standard_deviation=math.sqrt(variance),
        min=min(values),
        max=max(values),
    )


# =============================================================================
# Frequency rows with long-tail suppression
# =============================================================================


@dataclass(frozen=True)
class FrequencyRow:
    bucket: Hashable
    count: int
    percentage: str

    def to_dict(self) -> dict[str, Any]:
        return {"bucket": self.bucket, "count": self.count, "percentage": self.percentage}


@dataclass
class FrequencyRows:
    """The visible part of a frequency table plus its suppressed remainder.

    Attributes:
        rows: Emitted entries, most frequent first.
        total: Sum of all counts in the table, emitted or not.
        suppressed_items: Number of distinct buckets not emitted.
        suppressed_percentage: Share of ``total`` held by the suppressed
            buckets, or None when nothing was suppressed.
    """

    rows: list[FrequencyRow] = field(default_factory=list)
    total: int = 0
    suppressed_items: int = 0
    suppressed_percentage: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "total": self.total,
            "suppressed_items": self.suppressed_items,
            "suppressed_percentage": self.suppressed_percentage,
        }


def select_rows(counts: Mapping[Hashable, int], sample_size: int) -> FrequencyRows:
    """Apply the long-tail rule to one frequency table.

    Entries are emitted in descending order. Once MIN_ROWS have been emitted,
    emission stops right after the first entry whose count is below
    SUPPRESS_BELOW of ``sample_size`` (the number of keys sampled, not the
    table total). Percentages are relative to the table total.

    Raises:
        ValueError: If sample_size is not positive.
    """
    if sample_size <= 0:
        raise ValueError(f"sample_size must be positive, got {sample_size}")

    entries = sorted_descending(counts)
    total = sum(count for _, count in entries)
    rows: list[FrequencyRow] = []
    emitted = 0
    for bucket, count in entries:
        rows.append(FrequencyRow(bucket, count, percentage(count, total)))
        emitted += count
        if len(rows) >= MIN_ROWS and count / sample_size < SUPPRESS_BELOW:
            break

    result = FrequencyRows(rows=rows, total=total)
    if len(rows) != len(entries):
        result.suppressed_items = len(entries) - len(rows)
        result.suppressed_percentage = percentage(total - emitted, total)
    return result


# =============================================================================
# Report assembly
# =============================================================================


@dataclass
class PrefixReport:
    """Everything reported for one prefix of one metric."""

    prefix: str
    frequencies: FrequencyRows
    statistics: Statistics | None = None
    powers: FrequencyRows | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "prefix": self.prefix,
            "frequencies": self.frequencies.to_dict(),
        }
        if self.statistics is not None:
            result["statistics"] = self.statistics.to_dict()
        if self.powers is not None:
            result["powers"] = self.powers.to_dict()
        return result


@dataclass
class ReportSection:
    title: str
    metric: Metric
    prefixes: list[PrefixReport] = field(default_factory=list)
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "title": self.title,
            "metric": self.metric.value,
            "prefixes": [p.to_dict() for p in self.prefixes],
        }
        if self.note:
            result["note"] = self.note
        return result


@dataclass
class SampleReport:
    """Ordered report sections for one sampling run."""

    sample_size: int
    sections: list[ReportSection] = field(default_factory=list)

    def section(self, metric: Metric) -> ReportSection | None:
        for section in self.sections:
            if section.metric is metric:
                return section
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sample_size": self.sample_size,
            "sections": [s.to_dict() for s in self.sections],
        }


# (gate metric, [(title, metric), ...]); a group is reported only when its
# gate table has entries.
_TYPE_GROUPS: list[tuple[Metric, list[tuple[str, Metric]]]] = [
    (Metric.STRING_SIZE, [
        ("Strings, size of values", Metric.STRING_SIZE),
    ]),
    (Metric.LIST_LENGTH, [
        ("Lists, number of elements", Metric.LIST_LENGTH),
        ("Lists, size of elements", Metric.LIST_ELEMENT_SIZE),
    ]),
    (Metric.SET_CARDINALITY, [
        ("Sets, number of elements", Metric.SET_CARDINALITY),
        ("Sets, size of elements", Metric.SET_ELEMENT_SIZE),
    ]),
    (Metric.ZSET_CARDINALITY, [
        ("Sorted sets, number of elements", Metric.ZSET_CARDINALITY),
        ("Sorted sets, size of elements", Metric.ZSET_ELEMENT_SIZE),
    ]),
    (Metric.HASH_LENGTH, [
        ("Hashes, number of fields", Metric.HASH_LENGTH),
        ("Hashes, size of fields", Metric.HASH_FIELD_SIZE),
        ("Hashes, size of values", Metric.HASH_VALUE_SIZE),
    ]),
]


def build_section(
    title: str,
    metric: Metric,
    table: FrequencyTable,
    sample_size: int,
    numeric: bool = True,
    note: str | None = None,
) -> ReportSection:
    """Report one metric: frequencies per prefix, plus stats and powers if numeric."""
    section = ReportSection(title=title, metric=metric, note=note)
    for prefix, counts in table.items():
        prefix_report = PrefixReport(prefix=prefix, frequencies=select_rows(counts, sample_size))
        if numeric:
            prefix_report.statistics = compute_statistics(counts)
            prefix_report.powers = select_rows(power_of_two_histogram(counts), sample_size)
        section.prefixes.append(prefix_report)
    return section


def build_report(tables: SampleTables, sample_size: int) -> SampleReport:
    """Assemble the full report for one sampling run.

    Types and expirations are always reported. Each value-type group is
    reported only if at least one key of that type produced a size.
    """
    report = SampleReport(sample_size=sample_size)
    report.sections.append(
        build_section("Types", Metric.TYPE, tables[Metric.TYPE], sample_size, numeric=False)
    )
    report.sections.append(
        build_section(
            "Expires", Metric.EXPIRATION, tables[Metric.EXPIRATION], sample_size, note=NO_EXPIRE_NOTE
        )
    )
    for gate, members in _TYPE_GROUPS:
        if not tables[gate]:
            continue
        for title, metric in members:
            report.sections.append(build_section(title, metric, tables[metric], sample_size))
    return report
