"""redissampler: statistical profiling of a Redis keyspace by random sampling.

Draws random keys, classifies them by type and by prefix (the text before the
first ``:``), and reports size, cardinality and expiration distributions.
Only read commands are issued.

Example:
    import redis
    from redissampler import RedisKeyStoreClient, Sampler, build_report, render_report

    store = RedisKeyStoreClient(redis.Redis(decode_responses=False))
    tables = Sampler(store, sample_size=10_000).sample()
    print(render_report(build_report(tables, 10_000)))
"""

import logging

from redissampler.config import SamplerConfig
from redissampler.errors import (
    ConfigurationError,
    ConnectionFailure,
    EmptyStoreError,
    QueryError,
    SamplerError,
)
from redissampler.frequency import UNKNOWN, FrequencyTable, Metric, SampleTables, key_prefix
from redissampler.keystore import KeyStoreClient, Probe, RedisKeyStoreClient
from redissampler.logging_config import (
    configure_from_env,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
)
from redissampler.render import render_report
from redissampler.report import (
    FrequencyRows,
    SampleReport,
    Statistics,
    build_report,
    compute_statistics,
    percentage,
    power_of_two_bucket,
    power_of_two_histogram,
    select_rows,
    sorted_descending,
)
from redissampler.sampler import KeyType, Sampler

# Silent unless the application enables logging.
logging.getLogger("redissampler").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Sampling
    "KeyType",
    "Sampler",
    "SamplerConfig",
    # Store access
    "KeyStoreClient",
    "Probe",
    "RedisKeyStoreClient",
    # Tables
    "FrequencyTable",
    "Metric",
    "SampleTables",
    "UNKNOWN",
    "key_prefix",
    # Reporting
    "FrequencyRows",
    "SampleReport",
    "Statistics",
    "build_report",
    "compute_statistics",
    "percentage",
    "power_of_two_bucket",
    "power_of_two_histogram",
    "render_report",
    "select_rows",
    "sorted_descending",
    # Errors
    "ConfigurationError",
    "ConnectionFailure",
    "EmptyStoreError",
    "QueryError",
    "SamplerError",
    # Logging
    "configure_from_env",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
]
