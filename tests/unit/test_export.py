"""Tests for DataFrame/CSV export and histogram charts."""

import pandas as pd
import pytest

from redissampler.export import (
    FREQUENCY_COLUMNS,
    STATISTICS_COLUMNS,
    plot_power_histograms,
    report_to_dataframe,
    statistics_to_dataframe,
    write_csv,
)
from redissampler.frequency import UNKNOWN, Metric, SampleTables
from redissampler.report import build_report


@pytest.fixture
def report():
    tables = SampleTables()
    for prefix, key_type, ttl in [("user", "string", UNKNOWN), ("user", "string", 60), ("cart", "list", UNKNOWN)]:
        tables.record(Metric.TYPE, prefix, key_type)
        tables.record(Metric.EXPIRATION, prefix, ttl)
    tables.record(Metric.STRING_SIZE, "user", 5)
    tables.record(Metric.STRING_SIZE, "user", 700)
    tables.record(Metric.LIST_LENGTH, "cart", 3)
    tables.record(Metric.LIST_ELEMENT_SIZE, "cart", 12)
    return build_report(tables, sample_size=3)


class TestReportToDataFrame:
    def test_columns(self, report):
        df = report_to_dataframe(report)
        assert list(df.columns) == FREQUENCY_COLUMNS

    def test_rows(self, report):
        df = report_to_dataframe(report)
        types = df[df["metric"] == "type"]

        assert list(types["prefix"]) == ["user", "cart"]
        assert list(types["bucket"]) == ["string", "list"]
        assert list(types["count"]) == [2, 1]
        assert list(types["percentage"]) == [100.0, 100.0]

    def test_buckets_are_strings(self, report):
        df = report_to_dataframe(report)
        sizes = df[df["metric"] == "string_size"]

        assert sorted(sizes["bucket"]) == ["5", "700"]
        assert sizes["percentage"].sum() == pytest.approx(100.0)


class TestStatisticsToDataFrame:
    def test_only_numeric_sections(self, report):
        df = statistics_to_dataframe(report)

        assert list(df.columns) == STATISTICS_COLUMNS
        assert "type" not in set(df["metric"])

    def test_values(self, report):
        df = statistics_to_dataframe(report)
        row = df[(df["metric"] == "string_size") & (df["prefix"] == "user")].iloc[0]

        assert row["average"] == pytest.approx(352.5)
        assert row["min"] == 5
        assert row["max"] == 700


class TestWriteCsv:
    def test_writes_both_files(self, report, tmp_path):
        paths = write_csv(report, tmp_path / "out")

        assert [p.name for p in paths] == ["frequencies.csv", "statistics.csv"]
        frequencies = pd.read_csv(paths[0])
        assert len(frequencies) == len(report_to_dataframe(report))


class TestPlotPowerHistograms:
    def test_one_chart_per_numeric_section(self, report, test_output_dir):
        paths = plot_power_histograms(report, test_output_dir)

        assert [p.name for p in paths] == [
            "expiration.png",
            "string_size.png",
            "list_length.png",
            "list_element_size.png",
        ]
        assert all(p.exists() and p.stat().st_size > 0 for p in paths)

    def test_sections_without_powers_are_skipped(self, tmp_path):
        tables = SampleTables()
        tables.record(Metric.TYPE, "user", "string")
        tables.record(Metric.EXPIRATION, "user", UNKNOWN)
        report = build_report(tables, sample_size=1)

        assert plot_power_histograms(report, tmp_path) == []
