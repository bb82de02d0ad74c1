"""Tabular and graphical export of a SampleReport.

DataFrames are in long format so they can be filtered and pivoted freely:
one row per emitted frequency row, or one row per (section, prefix) for the
statistics.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from redissampler.report import SampleReport

logger = logging.getLogger(__name__)

FREQUENCY_COLUMNS = ["section", "metric", "prefix", "bucket", "count", "percentage"]
STATISTICS_COLUMNS = ["section", "metric", "prefix", "average", "standard_deviation", "min", "max"]


def report_to_dataframe(report: SampleReport) -> pd.DataFrame:
    """Emitted frequency rows of every section, one DataFrame row each.

    Suppressed long-tail entries are not included.
    """
    records = []
    for section in report.sections:
        for p in section.prefixes:
            for row in p.frequencies.rows:
                records.append({
                    "section": section.title,
                    "metric": section.metric.value,
                    "prefix": p.prefix,
                    "bucket": str(row.bucket),
                    "count": row.count,
                    "percentage": row.count * 100 / p.frequencies.total,
                })
    return pd.DataFrame(records, columns=FREQUENCY_COLUMNS)


def statistics_to_dataframe(report: SampleReport) -> pd.DataFrame:
    records = []
    for section in report.sections:
        for p in section.prefixes:
            if p.statistics is None:
                continue
            records.append({
                "section": section.title,
                "metric": section.metric.value,
                "prefix": p.prefix,
                **p.statistics.to_dict(),
            })
    return pd.DataFrame(records, columns=STATISTICS_COLUMNS)


def write_csv(report: SampleReport, output_dir: str | Path) -> list[Path]:
    """Write ``frequencies.csv`` and ``statistics.csv`` into ``output_dir``.

    Returns:
        The written paths.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    frequencies_path = output_dir / "frequencies.csv"
    statistics_path = output_dir / "statistics.csv"
    report_to_dataframe(report).to_csv(frequencies_path, index=False)
    statistics_to_dataframe(report).to_csv(statistics_path, index=False)
    logger.info("Saved: %s, %s", frequencies_path, statistics_path)
    return [frequencies_path, statistics_path]


def _power_sort_key(label: object) -> float:
    # Labels look like "<= 64".
    return float(str(label).removeprefix("<= "))


def plot_power_histograms(report: SampleReport, output_dir: str | Path) -> list[Path]:
    """Save one bar chart per numeric section, one subplot per prefix.

    Sections without any power-of-two rows are skipped.

    Returns:
        The written PNG paths, in report order.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths: list[Path] = []
    for section in report.sections:
        prefixes = [p for p in section.prefixes if p.powers is not None and p.powers.rows]
        if not prefixes:
            continue

        fig, axes = plt.subplots(1, len(prefixes), figsize=(6 * len(prefixes), 5), squeeze=False)
        for ax, p in zip(axes[0], prefixes):
            rows = sorted(p.powers.rows, key=lambda row: _power_sort_key(row.bucket))
            ax.bar([str(row.bucket) for row in rows], [row.count for row in rows],
                   color="steelblue", alpha=0.8)
            ax.set_xlabel("Size")
            ax.set_ylabel("Keys")
            ax.set_title(f"{p.prefix}")
            ax.tick_params(axis="x", rotation=45)
            ax.grid(True, alpha=0.2)

        fig.suptitle(f"{section.title} (powers of two)")
        fig.tight_layout()

        path = output_dir / f"{section.metric.value}.png"
        fig.savefig(path, dpi=150)
        plt.close(fig)
        logger.info("Saved: %s", path)
        paths.append(path)
    return paths
