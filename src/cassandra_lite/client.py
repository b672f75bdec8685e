"""Keyspace client façade.

:class:`KeyspaceClient` is the public entry point. Every method resolves the
effective consistency level, builds the Thrift parameter structs with
:mod:`cassandra_lite.request`, and performs one blocking RPC (or, for
``insert()``, one RPC per column) on the client's single connection. Results
and server errors are returned and raised unchanged.

Example::

    from cassandra_lite import KeyspaceClient

    client = KeyspaceClient(keyspace="Keyspace1")
    client.insert("BlogArticle", "key12345", {"title": "testing title", "body": "..."})
    columns = client.get_slice("BlogArticle", "key12345", range=("a", None))
    title = client.get("BlogArticle", "key12345", "title", consistency_level="QUORUM")
    client.remove("BlogArticle", "key12345")
    client.keyspace = "BlogArticleComment"
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from cassandra_lite import request
from cassandra_lite.config import CassandraLiteConfig, resolve_config
from cassandra_lite.connection import ConnectionManager, Endpoint
from cassandra_lite.consistency import ConsistencyResolver, LevelLike
from cassandra_lite.protocol.ttypes import ConsistencyLevel, KeyRange
from cassandra_lite.retry import RetryPolicy


def now_micros() -> int:
    """Current wall-clock time in microseconds since the epoch."""
    return time.time_ns() // 1000


class KeyspaceClient:
    """Convenience client for one Cassandra keyspace over Thrift.

    The connection is opened on the first call that needs it and kept until
    :meth:`close`. An instance is not thread-safe; use one client per
    thread.

    Args:
        config: Base configuration. Defaults to ``CassandraLiteConfig()``
            (environment and ``.env`` aware).
        connection: Pre-built connection manager, mainly for tests.
        clock: Returns write timestamps in microseconds.
        retry_policy: Connect retry policy for the default connection manager.
        **overrides: Config fields to override, e.g. ``server_name="db1"``.

    Raises:
        ConfigValidationError: If an override is unknown or invalid.
        InvalidConsistencyLevelError: If a default level name is unknown.
    """

    def __init__(
        self,
        config: CassandraLiteConfig | None = None,
        *,
        connection: ConnectionManager | None = None,
        clock: Callable[[], int] | None = None,
        retry_policy: RetryPolicy | None = None,
        **overrides: Any,
    ) -> None:
        base = config if config is not None else CassandraLiteConfig()
        self._config = resolve_config(base, overrides)
        self._consistency = ConsistencyResolver(
            read=self._config.consistency_level_read,
            write=self._config.consistency_level_write,
        )
        self._clock = clock or now_micros
        self._connection = connection or ConnectionManager(
            Endpoint.from_config(self._config),
            retry_policy=retry_policy,
        )
        if self._config.keyspace is not None:
            self._connection.set_keyspace(self._config.keyspace)

    # --- Properties ---

    @property
    def config(self) -> CassandraLiteConfig:
        return self._config

    @property
    def endpoint(self) -> Endpoint:
        return self._connection.endpoint

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def keyspace(self) -> str | None:
        return self._connection.keyspace

    @keyspace.setter
    def keyspace(self, name: str) -> None:
        self._connection.set_keyspace(name)

    @property
    def consistency_level_read(self) -> ConsistencyLevel:
        return self._consistency.read

    @consistency_level_read.setter
    def consistency_level_read(self, level: LevelLike) -> None:
        self._consistency.set_default("read", level)

    @property
    def consistency_level_write(self) -> ConsistencyLevel:
        return self._consistency.write

    @consistency_level_write.setter
    def consistency_level_write(self, level: LevelLike) -> None:
        self._consistency.set_default("write", level)

    # --- Reads ---

    def get(
        self,
        family: str,
        key: Any,
        column: Any,
        *,
        consistency_level: LevelLike | None = None,
    ) -> Any:
        """Fetch one column of one row.

        Returns:
            The ``ColumnOrSuperColumn`` holding the column.

        Raises:
            NotFoundException: If the row or column does not exist.
        """
        level = self._consistency.resolve("read", consistency_level)
        path = request.column_path(family, column)
        return self._connection.stub.get(request.to_bytes(key), path, level)

    def get_slice(
        self,
        family: str,
        key: Any,
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        """Fetch columns of one row, or of several rows when *key* is a list.

        Columns are chosen by explicit *columns* names, or by
        ``range=(start, finish)`` where ``None`` means unbounded. With
        neither, the whole row is sliced (up to *count* columns).

        Returns:
            A list of ``ColumnOrSuperColumn`` for a single key, or a dict
            mapping each key (bytes) to such a list for a list of keys.
        """
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        stub = self._connection.stub
        if request.is_multi_key(key):
            return stub.multiget_slice(_keys(key), parent, predicate, level)
        return stub.get_slice(request.to_bytes(key), parent, predicate, level)

    def multiget_slice(
        self,
        family: str,
        keys: Iterable[Any],
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        return self._connection.stub.multiget_slice(_keys(keys), parent, predicate, level)

    def get_count(
        self,
        family: str,
        key: Any,
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        """Count the columns :meth:`get_slice` would return.

        Returns:
            An ``int`` for a single key, or a dict of key (bytes) to count
            for a list of keys.
        """
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        stub = self._connection.stub
        if request.is_multi_key(key):
            return stub.multiget_count(_keys(key), parent, predicate, level)
        return stub.get_count(request.to_bytes(key), parent, predicate, level)

    def multiget_count(
        self,
        family: str,
        keys: Iterable[Any],
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        return self._connection.stub.multiget_count(_keys(keys), parent, predicate, level)

    def get_range_slices(
        self,
        family: str,
        key_range: Mapping[str, Any] | KeyRange | None = None,
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        """Slice a range of rows.

        Args:
            family: Column family name.
            key_range: A ``KeyRange``, or a mapping of
                :func:`~cassandra_lite.request.key_range` arguments
                (``start_key``, ``end_key``, ``start_token``, ``end_token``,
                ``count``). Defaults to all rows, 100 at most.
            columns: Explicit column names to return per row.
            range: ``(start, finish)`` column range, used when *columns* is not given.
            count: Maximum columns per row for a range slice.
            reversed: Return columns in descending order.
            consistency_level: Per-call level override.

        Returns:
            A list of ``KeySlice``.
        """
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        if not isinstance(key_range, KeyRange):
            key_range = request.key_range(**(key_range or {}))
        return self._connection.stub.get_range_slices(parent, predicate, key_range, level)

    def get_indexed_slices(
        self,
        family: str,
        indexes: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
        columns: Iterable[Any] | None = None,
        range: Sequence[Any] | None = None,  # noqa: A002
        *,
        start_key: Any = b"",
        index_count: int = request.DEFAULT_COUNT,
        count: int = request.DEFAULT_COUNT,
        reversed: bool = False,  # noqa: A002
        consistency_level: LevelLike | None = None,
    ) -> Any:
        """Fetch rows whose indexed columns equal the given values.

        Args:
            family: Column family name.
            indexes: ``{column: value}`` or ``[(column, value), ...]``; all
                expressions must match (equality only).
            columns: Explicit column names to return per row.
            range: ``(start, finish)`` column range, used when *columns* is not given.
            start_key: First row key to consider.
            index_count: Maximum number of rows.
            count: Maximum columns per row for a range slice.
            reversed: Return columns in descending order.
            consistency_level: Per-call level override.

        Returns:
            A list of ``KeySlice``.
        """
        level = self._consistency.resolve("read", consistency_level)
        parent = request.column_parent(family)
        pairs = indexes.items() if isinstance(indexes, Mapping) else indexes
        clause = request.index_clause(pairs, start_key=start_key, count=index_count)
        predicate = request.slice_predicate(columns, range, count=count, reversed=reversed)
        return self._connection.stub.get_indexed_slices(parent, clause, predicate, level)

    # --- Writes ---

    def insert(
        self,
        family: str,
        key: Any,
        columns: Mapping[Any, Any],
        *,
        timestamp: int | None = None,
        ttl: int | None = None,
        consistency_level: LevelLike | None = None,
    ) -> None:
        """Write each ``name: value`` of *columns* into one row.

        Issues one ``insert`` RPC per column; the writes are not atomic. All
        columns share one timestamp: *timestamp* if given, else the clock
        read once for the call.
        """
        level = self._consistency.resolve("write", consistency_level)
        parent = request.column_parent(family)
        ts = timestamp if timestamp is not None else self._clock()
        row_key = request.to_bytes(key)
        stub = self._connection.stub
        for name, value in columns.items():
            stub.insert(row_key, parent, request.column(name, value, ts, ttl=ttl), level)

    def remove(
        self,
        family: str,
        key: Any,
        column: Any | None = None,
        *,
        timestamp: int | None = None,
        consistency_level: LevelLike | None = None,
    ) -> None:
        """Delete a whole row, or one *column* of it."""
        level = self._consistency.resolve("write", consistency_level)
        path = request.column_path(family, column)
        ts = timestamp if timestamp is not None else self._clock()
        self._connection.stub.remove(request.to_bytes(key), path, ts, level)

    def batch_insert(
        self,
        data: Mapping[Any, Mapping[str, Sequence[Sequence[Any]]]],
        *,
        consistency_level: LevelLike | None = None,
    ) -> None:
        """Write many rows and families in a single ``batch_mutate`` RPC.

        Args:
            data: ``{key: {family: [(name, value[, timestamp]), ...]}}``.
            consistency_level: Per-call level override.
        """
        level = self._consistency.resolve("write", consistency_level)
        mutations = request.mutation_map(data, self._clock)
        self._connection.stub.batch_mutate(mutations, level)

    def truncate(self, family: str) -> None:
        """Remove all data from *family* on every node."""
        self._connection.stub.truncate(family)

    # --- Introspection ---

    def describe_keyspace(self, keyspace: str) -> Any:
        return self._connection.stub.describe_keyspace(keyspace)

    def describe_keyspaces(self) -> Any:
        return self._connection.stub.describe_keyspaces()

    def describe_cluster_name(self) -> str:
        return self._connection.stub.describe_cluster_name()

    def describe_partitioner(self) -> str:
        return self._connection.stub.describe_partitioner()

    def describe_ring(self, keyspace: str) -> Any:
        return self._connection.stub.describe_ring(keyspace)

    def describe_snitch(self) -> str:
        return self._connection.stub.describe_snitch()

    def describe_version(self) -> str:
        return self._connection.stub.describe_version()

    # --- Lifecycle ---

    def connect(self) -> None:
        """Open the connection now instead of on first use.

        Also the only way to try again after a failed connect.
        """
        self._connection.connect()

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> KeyspaceClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def health_check(self) -> dict[str, Any]:
        """Return connection status and the consistency defaults.

        The password is never included.
        """
        status = self._connection.health_check()
        status["consistency_level_read"] = self._consistency.read.name
        status["consistency_level_write"] = self._consistency.write.name
        return status


def _keys(keys: Iterable[Any]) -> list[bytes]:
    return [request.to_bytes(key) for key in keys]
