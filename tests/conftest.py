"""
Shared pytest fixtures for redis-sampler tests.
"""

import logging
from itertools import cycle
from pathlib import Path

import fakeredis
import pytest

from redissampler.keystore import RedisKeyStoreClient


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Root test_output directory, created once per session. Charts and CSV
    files written by tests stay here after the run for inspection.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Per-test output directory: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_dir = test_output_root / module_name / request.node.name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def fake_redis():
    """An isolated in-memory Redis that returns raw bytes."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=False)
    yield client
    client.close()


@pytest.fixture
def store(fake_redis) -> RedisKeyStoreClient:
    return RedisKeyStoreClient(fake_redis)


@pytest.fixture
def script_random_keys(fake_redis, monkeypatch):
    """Make RANDOMKEY cycle through the given keys in order.

    Usage:
        script_random_keys([b"user:1", b"user:2"])
    """

    def _script(keys: list[bytes]) -> None:
        it = cycle(keys)
        monkeypatch.setattr(fake_redis, "randomkey", lambda: next(it))

    return _script


@pytest.fixture(autouse=True)
def reset_redissampler_logging():
    """Give every test a silent ``redissampler`` logger at level NOTSET."""
    logger = logging.getLogger("redissampler")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
