"""cassandra-lite: a simple way to access Cassandra 0.7 over Thrift.

A thin façade over the Cassandra Thrift service that orders arguments
conveniently and supplies defaults: consistency levels, write timestamps and
unbounded slice ranges. One lazily opened connection per client.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("cassandra-lite")
except PackageNotFoundError:
    __version__ = "0.0.0"

from cassandra_lite.client import KeyspaceClient
from cassandra_lite.config import CassandraLiteConfig, resolve_config
from cassandra_lite.connection import ConnectionManager, ConnectionState, Endpoint
from cassandra_lite.consistency import ConsistencyResolver, parse_consistency_level
from cassandra_lite.exceptions import (
    AuthenticationError,
    CassandraLiteError,
    ClientConnectionError,
    ConfigValidationError,
    InvalidConsistencyLevelError,
    NotConnectedError,
    ProtocolError,
)
from cassandra_lite.protocol.ttypes import ConsistencyLevel
from cassandra_lite.retry import NoRetryPolicy, RetryPolicy

__all__ = [
    "AuthenticationError",
    "CassandraLiteConfig",
    "CassandraLiteError",
    "ClientConnectionError",
    "ConfigValidationError",
    "ConnectionManager",
    "ConnectionState",
    "ConsistencyLevel",
    "ConsistencyResolver",
    "Endpoint",
    "InvalidConsistencyLevelError",
    "KeyspaceClient",
    "NoRetryPolicy",
    "NotConnectedError",
    "ProtocolError",
    "RetryPolicy",
    "__version__",
    "parse_consistency_level",
    "resolve_config",
]
