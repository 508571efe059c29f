"""
Shared fixtures and configuration for the HashRing test suite.
"""

import logging

import pytest

from hashring import HashRing

# Configure test logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "slow: mark test as slow running")


class TableHash:
    """Hash function backed by a fixed table, for placing positions by hand"""

    def __init__(self, table, default=0):
        self.table = dict(table)
        self.default = default

    def __call__(self, key):
        return self.table.get(key, self.default)


@pytest.fixture
def table_hash():
    """Factory for table-driven hash functions"""
    return TableHash


@pytest.fixture
def four_node_ring():
    """Ring with four nodes and the default replica count"""
    return HashRing(150, ["node_0", "node_1", "node_2", "node_3"])


@pytest.fixture
def sample_keys():
    """Deterministic set of keys"""
    return [f"test_key_{i}" for i in range(2000)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep HASHRING_* variables from leaking into tests"""
    for name in ("HASHRING_REPLICAS", "HASHRING_NODES", "HASHRING_HASH_FUNCTION",
                 "HASHRING_SEPARATOR", "HASHRING_LOG_LEVEL", "HASHRING_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
