"""Plain-text rendering of a SampleReport.

Layout:

    TYPES
    =====

    # for user
     string: 2 (66.67%)       hash: 1 (33.33%)

Frequency cells are padded to CELL_WIDTH and laid out CELLS_PER_LINE per
line. For numeric sections, the frequency blocks of all prefixes come first,
then the average/stddev blocks, then the power-of-two blocks.
"""

from __future__ import annotations

from redissampler.report import FrequencyRows, ReportSection, SampleReport, Statistics

CELL_WIDTH = 25
CELLS_PER_LINE = 3

POWERS_HEADER = "Powers of two distribution: (NOTE <= p means: p/2 < x <= p)"


def render_rows(rows: FrequencyRows) -> list[str]:
    lines: list[str] = []
    line = ""
    for i, row in enumerate(rows.rows, start=1):
        line += f" {row.bucket}: {row.count} ({row.percentage})".ljust(CELL_WIDTH)
        if i % CELLS_PER_LINE == 0:
            lines.append(line)
            line = ""
    if line:
        lines.append(line)
    if rows.suppressed_items:
        lines.append(
            f"(suppressed {rows.suppressed_items} items with perc < 0.5% "
            f"for a total of {rows.suppressed_percentage})"
        )
    return lines


def render_statistics(stats: Statistics) -> list[str]:
    return [
        f" Average: {stats.average:.2f} Standard Deviation: {stats.standard_deviation:.2f}",
        f" Min: {stats.min} Max: {stats.max}",
    ]


def render_section(section: ReportSection) -> list[str]:
    lines = ["", section.title.upper(), "=" * len(section.title)]

    for p in section.prefixes:
        lines += ["", f"# for {p.prefix}"]
        lines += render_rows(p.frequencies)

    for p in section.prefixes:
        if p.statistics is not None:
            lines += ["", f"# for {p.prefix}"]
            lines += render_statistics(p.statistics)

    for p in section.prefixes:
        if p.powers is not None:
            lines += ["", f"# for {p.prefix}", "", POWERS_HEADER]
            lines += render_rows(p.powers)

    if section.note:
        lines += ["", section.note]
    return lines


def render_report(report: SampleReport) -> str:
    """Render the whole report as text (ends with a blank line)."""
    lines: list[str] = []
    for section in report.sections:
        lines += render_section(section)
    lines.append("")
    return "\n".join(lines) + "\n"


def render_banner(host: str, port: int, db: int, sample_size: int) -> str:
    return f"Sampling {host}:{port} DB:{db} with {sample_size} RANDOMKEYS"
