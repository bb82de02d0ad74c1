"""Tests for FrequencyTable and SampleTables."""

import pytest

from redissampler.frequency import UNKNOWN, FrequencyTable, Metric, SampleTables, key_prefix


class TestKeyPrefix:
    def test_text_before_first_separator(self):
        assert key_prefix("user:1") == "user"

    def test_only_first_separator_counts(self):
        assert key_prefix("user:1:profile") == "user"

    def test_key_without_separator_is_its_own_prefix(self):
        assert key_prefix("counter") == "counter"

    def test_leading_separator_gives_empty_prefix(self):
        assert key_prefix(":orphan") == ""


class TestFrequencyTable:
    def test_starts_empty(self):
        table = FrequencyTable()
        assert len(table) == 0
        assert not table
        assert table.total() == 0

    def test_increment_creates_prefix_on_demand(self):
        table = FrequencyTable()
        table.increment("user", "string")

        assert "user" in table
        assert table["user"] == {"string": 1}

    def test_increment_accumulates(self):
        table = FrequencyTable()
        table.increment("user", 5)
        table.increment("user", 5)
        table.increment("user", 7)

        assert table["user"] == {5: 2, 7: 1}
        assert table.prefix_total("user") == 3

    def test_mixed_bucket_types(self):
        """Numeric buckets and the unknown sentinel live side by side."""
        table = FrequencyTable()
        table.increment("s", 100)
        table.increment("s", UNKNOWN)

        assert table["s"] == {100: 1, UNKNOWN: 1}

    def test_rejects_non_positive_count(self):
        table = FrequencyTable()
        with pytest.raises(ValueError, match="must be positive"):
            table.increment("user", "string", count=0)

    def test_prefixes_in_first_seen_order(self):
        table = FrequencyTable()
        for prefix in ["b", "a", "b", "c"]:
            table.increment(prefix, 1)

        assert table.prefixes() == ["b", "a", "c"]

    def test_getitem_returns_copy(self):
        table = FrequencyTable()
        table.increment("user", 1)
        table["user"][1] = 99

        assert table["user"] == {1: 1}

    def test_prefix_total_for_unseen_prefix(self):
        assert FrequencyTable().prefix_total("nope") == 0

    def test_equality_with_plain_dict(self):
        table = FrequencyTable()
        table.increment("user", "string", 2)

        assert table == {"user": {"string": 2}}

    def test_clear(self):
        table = FrequencyTable()
        table.increment("user", 1)
        table.clear()

        assert len(table) == 0


class TestFrequencyTableMerge:
    def test_merge_sums_counts(self):
        a = FrequencyTable()
        a.increment("user", 5, 2)
        b = FrequencyTable()
        b.increment("user", 5, 3)
        b.increment("user", 9)
        b.increment("session", UNKNOWN)

        a.merge(b)

        assert a == {"user": {5: 5, 9: 1}, "session": {UNKNOWN: 1}}
        assert a.total() == 7

    def test_merge_leaves_other_untouched(self):
        a = FrequencyTable()
        b = FrequencyTable()
        b.increment("user", 1)

        a.merge(b)
        a.increment("user", 1)

        assert b == {"user": {1: 1}}

    def test_merge_rejects_other_types(self):
        with pytest.raises(TypeError):
            FrequencyTable().merge({"user": {1: 1}})


class TestSampleTables:
    def test_one_table_per_metric(self):
        tables = SampleTables()
        assert set(tables) == set(Metric)
        assert all(not tables[m] for m in Metric)

    def test_record(self):
        tables = SampleTables()
        tables.record(Metric.STRING_SIZE, "user", 5)

        assert tables[Metric.STRING_SIZE] == {"user": {5: 1}}
        assert not tables[Metric.LIST_LENGTH]

    def test_merge(self):
        a = SampleTables()
        a.record(Metric.TYPE, "user", "string")
        b = SampleTables()
        b.record(Metric.TYPE, "user", "string")
        b.record(Metric.TYPE, "user", "hash")
        b.record(Metric.HASH_LENGTH, "user", 3)

        a.merge(b)

        assert a[Metric.TYPE] == {"user": {"string": 2, "hash": 1}}
        assert a[Metric.HASH_LENGTH] == {"user": {3: 1}}

    def test_to_dict_keys_by_metric_value(self):
        tables = SampleTables()
        tables.record(Metric.EXPIRATION, "user", UNKNOWN)

        data = tables.to_dict()
        assert data["expiration"] == {"user": {UNKNOWN: 1}}
        assert data["type"] == {}
