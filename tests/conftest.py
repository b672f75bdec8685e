"""Shared pytest fixtures for cassandra-lite tests.

Provides a config isolated from ``.env`` files, a mocked transport and
service stub, and clients wired to them so no test needs a live server.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cassandra_lite.client import KeyspaceClient
from cassandra_lite.config import CassandraLiteConfig
from cassandra_lite.connection import ConnectionManager, Endpoint

FIXED_TIMESTAMP = 1_300_000_000_000_000


@pytest.fixture
def default_config() -> CassandraLiteConfig:
    """Return a CassandraLiteConfig with all default values (no .env file)."""
    return CassandraLiteConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint(host="db1", port=9160, username="alice", password="s3cret")


@pytest.fixture
def mock_transport() -> MagicMock:
    """Return a transport double whose open()/close() always succeed."""
    return MagicMock(name="transport")


@pytest.fixture
def mock_stub() -> MagicMock:
    """Return a service stub double recording every RPC."""
    return MagicMock(name="stub")


@pytest.fixture
def connection(
    endpoint: Endpoint, mock_transport: MagicMock, mock_stub: MagicMock
) -> ConnectionManager:
    """Return a ConnectionManager that builds the mocked transport and stub."""
    return ConnectionManager(
        endpoint,
        transport_factory=lambda _endpoint: mock_transport,
        stub_factory=lambda _transport: mock_stub,
    )


@pytest.fixture
def client(default_config: CassandraLiteConfig, connection: ConnectionManager) -> KeyspaceClient:
    """Return a client on the mocked connection with a fixed write clock."""
    return KeyspaceClient(default_config, connection=connection, clock=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def fixed_timestamp() -> int:
    """The timestamp produced by the ``client`` fixture's clock."""
    return FIXED_TIMESTAMP
