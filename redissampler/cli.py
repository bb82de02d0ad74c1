"""Command-line interface.

Usage:
    redis-sampler <host> <port> <dbnum> <sample_size>

The banner and then the report go to stdout. Any store error aborts the run
before a report exists: the banner has already been printed, the error is
written to stderr and the exit status is 1. Logging is configured from
RS_LOGGING / RS_LOG_FILE / RS_LOG_JSON. RS_EXPORT_DIR additionally saves CSV
tables and histogram charts once the report is printed; an export failure is
reported on stderr and also exits 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from redissampler.config import SamplerConfig
from redissampler.errors import SamplerError
from redissampler.keystore import RedisKeyStoreClient
from redissampler.logging_config import configure_from_env
from redissampler.render import render_banner, render_report
from redissampler.report import SampleReport, build_report
from redissampler.sampler import Sampler

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def _positive_int(value: str) -> int:
    n = _non_negative_int(value)
    if n == 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redis-sampler",
        description="Sample random keys from a Redis database and report "
                    "type, size and expiration distributions per key prefix.",
    )
    parser.add_argument("host", help="Redis host")
    parser.add_argument("port", type=_positive_int, help="Redis port")
    parser.add_argument("dbnum", type=_non_negative_int, help="Database index")
    parser.add_argument("sample_size", type=_positive_int, help="Number of random keys to sample")
    return parser


def run(config: SamplerConfig) -> SampleReport:
    """Sample the configured database and build its report.

    Raises:
        SamplerError: On any store failure; no partial report is produced.
    """
    with RedisKeyStoreClient.from_config(config) as store:
        sampler = Sampler(store, config.sample_size)
        tables = sampler.sample()

    return build_report(tables, config.sample_size)


def export(report: SampleReport, export_dir: Path) -> None:
    from redissampler.export import plot_power_histograms, write_csv

    write_csv(report, export_dir)
    plot_power_histograms(report, export_dir)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_from_env()

    try:
        config = SamplerConfig.from_env(
            host=args.host, port=args.port, db=args.dbnum, sample_size=args.sample_size
        )
        print(render_banner(config.host, config.port, config.db, config.sample_size))
        report = run(config)
    except SamplerError as exc:
        logger.error("Sampling failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(render_report(report))
    sys.stdout.flush()

    if config.export_dir is not None:
        try:
            export(report, config.export_dir)
        except OSError as exc:
            logger.error("Export to %s failed: %s", config.export_dir, exc)
            print(f"error: export failed: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
