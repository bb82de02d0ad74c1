"""Exception hierarchy for redissampler.

Every failure the sampler can surface derives from SamplerError so callers
(the CLI in particular) can catch one type. Query failures are never retried:
an error raised mid-run discards the whole in-progress sample.
"""

from __future__ import annotations


class SamplerError(Exception):
    """Base class for all redissampler errors."""


class EmptyStoreError(SamplerError):
    """The selected database holds no keys, so RANDOMKEY has nothing to return."""


class ConnectionFailure(SamplerError):
    """Transport-level failure talking to the key-value store."""


class QueryError(SamplerError):
    """The store rejected or failed a read query."""


class ConfigurationError(SamplerError, ValueError):
    """Invalid sampler configuration (sample size, port, db index...)."""
