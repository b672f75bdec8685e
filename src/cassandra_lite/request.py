"""Builders for the Thrift parameter structs sent with each RPC.

All functions are pure: they take plain Python values and return
:mod:`cassandra_lite.protocol.ttypes` structs. Keys, column names and values
are coerced to ``bytes`` with :func:`to_bytes`. Family and column names are
not validated here; the server rejects malformed names.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from cassandra_lite.protocol.ttypes import (
    Column,
    ColumnOrSuperColumn,
    ColumnParent,
    ColumnPath,
    IndexClause,
    IndexExpression,
    IndexOperator,
    KeyRange,
    Mutation,
    SlicePredicate,
    SliceRange,
    SuperColumn,
)

DEFAULT_COUNT = 100

# Name of the super column that groups a family's columns in batch_insert().
SUPER_COLUMN_PLACEHOLDER = "SuperColumnName"

SliceBounds = Sequence[Any]


def to_bytes(value: Any) -> bytes:
    """Encode a key, column name or value for a binary Thrift field.

    ``bytes`` pass through, ``str`` is UTF-8 encoded and any other value is
    encoded from its ``str()`` form.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return str(value).encode("utf-8")


def is_multi_key(key: Any) -> bool:
    """Whether *key* selects several rows (a list, tuple or set of keys)."""
    return isinstance(key, (list, tuple, set, frozenset))


def column_parent(family: str) -> ColumnParent:
    return ColumnParent(column_family=family)


def column_path(family: str, column: Any | None = None) -> ColumnPath:
    """Path to a whole row of *family*, or to one *column* in it."""
    if column is None:
        return ColumnPath(column_family=family)
    return ColumnPath(column_family=family, column=to_bytes(column))


def slice_range(
    range: SliceBounds | None = None,  # noqa: A002
    count: int = DEFAULT_COUNT,
    reversed: bool = False,  # noqa: A002
) -> SliceRange:
    """Build a slice range; missing or ``None`` bounds become ``b""`` (unbounded).

    Args:
        range: ``(start, finish)``; either bound may be ``None`` or left
            out, so ``("a",)`` and ``()`` are accepted. Extra items are ignored.
        count: Maximum number of columns to return.
        reversed: Return columns in descending order.
    """
    start, finish = (*(range or ()), None, None)[:2]
    return SliceRange(
        start=b"" if start is None else to_bytes(start),
        finish=b"" if finish is None else to_bytes(finish),
        reversed=reversed,
        count=count,
    )


def slice_predicate(
    columns: Iterable[Any] | None = None,
    range: SliceBounds | None = None,  # noqa: A002
    count: int = DEFAULT_COUNT,
    reversed: bool = False,  # noqa: A002
) -> SlicePredicate:
    """Select columns by explicit *columns* names, or else by *range*."""
    if columns is not None:
        return SlicePredicate(column_names=[to_bytes(name) for name in columns])
    return SlicePredicate(slice_range=slice_range(range, count=count, reversed=reversed))


def key_range(
    start_key: Any | None = None,
    end_key: Any | None = None,
    start_token: str | None = None,
    end_token: str | None = None,
    count: int = DEFAULT_COUNT,
) -> KeyRange:
    """Build a row range by key, or by token when either token is given.

    Key bounds default to ``b""`` (unbounded) in the key form.
    """
    if start_token is not None or end_token is not None:
        return KeyRange(start_token=start_token, end_token=end_token, count=count)
    return KeyRange(
        start_key=b"" if start_key is None else to_bytes(start_key),
        end_key=b"" if end_key is None else to_bytes(end_key),
        count=count,
    )


def index_clause(
    indexes: Iterable[tuple[Any, Any]],
    start_key: Any = b"",
    count: int = DEFAULT_COUNT,
) -> IndexClause:
    """Build an equality index query.

    Args:
        indexes: ``(column_name, value)`` pairs, ANDed together. Only
            equality is supported.
        start_key: First row key to consider.
        count: Maximum number of rows to return.
    """
    expressions = [
        IndexExpression(column_name=to_bytes(name), op=IndexOperator.EQ, value=to_bytes(value))
        for name, value in indexes
    ]
    return IndexClause(expressions=expressions, start_key=to_bytes(start_key), count=count)


def column(name: Any, value: Any, timestamp: int, ttl: int | None = None) -> Column:
    return Column(name=to_bytes(name), value=to_bytes(value), timestamp=timestamp, ttl=ttl)


def mutation_map(
    data: Mapping[Any, Mapping[str, Sequence[Sequence[Any]]]],
    clock: Callable[[], int],
) -> dict[bytes, dict[str, list[Mutation]]]:
    """Turn ``{key: {family: [(name, value[, timestamp]), ...]}}`` into a mutation map.

    Each family's columns are grouped, in order, under one super column named
    :data:`SUPER_COLUMN_PLACEHOLDER`; entries without a timestamp (or with
    ``None``) get ``clock()``, read once per call.
    """
    now = clock()
    result: dict[bytes, dict[str, list[Mutation]]] = {}
    for key, families in data.items():
        by_family = result.setdefault(to_bytes(key), {})
        for family, entries in families.items():
            columns = []
            for entry in entries:
                name, value = entry[0], entry[1]
                timestamp = entry[2] if len(entry) > 2 and entry[2] is not None else now
                columns.append(column(name, value, timestamp))
            super_column = SuperColumn(name=to_bytes(SUPER_COLUMN_PLACEHOLDER), columns=columns)
            by_family[family] = [
                Mutation(column_or_supercolumn=ColumnOrSuperColumn(super_column=super_column))
            ]
    return result
