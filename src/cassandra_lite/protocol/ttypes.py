"""Thrift structs, enums and exceptions of the Cassandra 0.7 interface.

Only the subset of ``cassandra.thrift`` used by the client is described.
Classes follow the ``thrift --gen py:dynamic`` layout: every struct carries a
``thrift_spec`` tuple indexed by field id and inherits its ``read()`` and
``write()`` from :class:`thrift.protocol.TBase.TBase`, so encoding is done by
the ``thrift`` library's protocol implementation. Unknown fields sent by a
newer server are skipped on read.

Binary fields (keys, column names, values) must be ``bytes``; string fields
(family names, keyspace names, class names) are ``str``.
"""

from __future__ import annotations

import enum
from typing import Any

from thrift.protocol.TBase import TBase, TExceptionBase
from thrift.Thrift import TType

from cassandra_lite.exceptions import ProtocolError


class ConsistencyLevel(enum.IntEnum):
    """Replica acknowledgements required before an operation completes."""

    ONE = 1
    QUORUM = 2
    LOCAL_QUORUM = 3
    EACH_QUORUM = 4
    ALL = 5
    ANY = 6
    TWO = 7
    THREE = 8


class IndexOperator(enum.IntEnum):
    EQ = 0
    GTE = 1
    GT = 2
    LTE = 3
    LT = 4


class IndexType(enum.IntEnum):
    KEYS = 0


def _init_fields(obj: Any, kwargs: dict[str, Any]) -> None:
    for field in obj.thrift_spec:
        if field is None:
            continue
        setattr(obj, field[2], kwargs.pop(field[2], field[4]))
    if kwargs:
        raise TypeError(
            f"{type(obj).__name__} got unexpected fields: {', '.join(sorted(kwargs))}"
        )


class ThriftStruct(TBase):
    """Base for plain structs; fields are passed as keyword arguments."""

    __slots__ = ()
    thrift_spec: tuple[Any, ...] = (None,)

    def __init__(self, **kwargs: Any) -> None:
        _init_fields(self, kwargs)


class ThriftException(TExceptionBase, ProtocolError):
    """Base for exceptions declared by the Cassandra service."""

    __slots__ = ()
    thrift_spec: tuple[Any, ...] = (None,)

    def __init__(self, **kwargs: Any) -> None:
        _init_fields(self, kwargs)
        details = [getattr(self, name) for name in self.__slots__]
        Exception.__init__(self, *[d for d in details if d is not None])

    def __str__(self) -> str:
        return repr(self)

    __hash__ = Exception.__hash__


# ---------------------------------------------------------------------------
# Data structs
# ---------------------------------------------------------------------------


class Column(ThriftStruct):
    __slots__ = ("name", "value", "timestamp", "ttl")
    thrift_spec = (
        None,
        (1, TType.STRING, "name", "BINARY", None),
        (2, TType.STRING, "value", "BINARY", None),
        (3, TType.I64, "timestamp", None, None),
        (4, TType.I32, "ttl", None, None),
    )


class SuperColumn(ThriftStruct):
    __slots__ = ("name", "columns")
    thrift_spec = (
        None,
        (1, TType.STRING, "name", "BINARY", None),
        (2, TType.LIST, "columns", (TType.STRUCT, [Column, None], False), None),
    )


class ColumnOrSuperColumn(ThriftStruct):
    """Either a plain column or a super column, never both."""

    __slots__ = ("column", "super_column")
    thrift_spec = (
        None,
        (1, TType.STRUCT, "column", [Column, None], None),
        (2, TType.STRUCT, "super_column", [SuperColumn, None], None),
    )


class ColumnParent(ThriftStruct):
    __slots__ = ("column_family", "super_column")
    thrift_spec = (
        None,
        None,
        None,
        (3, TType.STRING, "column_family", "UTF8", None),
        (4, TType.STRING, "super_column", "BINARY", None),
    )


class ColumnPath(ThriftStruct):
    __slots__ = ("column_family", "super_column", "column")
    thrift_spec = (
        None,
        None,
        None,
        (3, TType.STRING, "column_family", "UTF8", None),
        (4, TType.STRING, "super_column", "BINARY", None),
        (5, TType.STRING, "column", "BINARY", None),
    )


class SliceRange(ThriftStruct):
    """Contiguous column-name range; empty bounds mean unbounded."""

    __slots__ = ("start", "finish", "reversed", "count")
    thrift_spec = (
        None,
        (1, TType.STRING, "start", "BINARY", None),
        (2, TType.STRING, "finish", "BINARY", None),
        (3, TType.BOOL, "reversed", None, False),
        (4, TType.I32, "count", None, 100),
    )


class SlicePredicate(ThriftStruct):
    __slots__ = ("column_names", "slice_range")
    thrift_spec = (
        None,
        (1, TType.LIST, "column_names", (TType.STRING, "BINARY", False), None),
        (2, TType.STRUCT, "slice_range", [SliceRange, None], None),
    )


class IndexExpression(ThriftStruct):
    __slots__ = ("column_name", "op", "value")
    thrift_spec = (
        None,
        (1, TType.STRING, "column_name", "BINARY", None),
        (2, TType.I32, "op", None, None),
        (3, TType.STRING, "value", "BINARY", None),
    )


class IndexClause(ThriftStruct):
    __slots__ = ("expressions", "start_key", "count")
    thrift_spec = (
        None,
        (1, TType.LIST, "expressions", (TType.STRUCT, [IndexExpression, None], False), None),
        (2, TType.STRING, "start_key", "BINARY", None),
        (3, TType.I32, "count", None, 100),
    )


class KeyRange(ThriftStruct):
    """Row range by key or by token; the two forms are exclusive."""

    __slots__ = ("start_key", "end_key", "start_token", "end_token", "count")
    thrift_spec = (
        None,
        (1, TType.STRING, "start_key", "BINARY", None),
        (2, TType.STRING, "end_key", "BINARY", None),
        (3, TType.STRING, "start_token", "UTF8", None),
        (4, TType.STRING, "end_token", "UTF8", None),
        (5, TType.I32, "count", None, 100),
    )


class KeySlice(ThriftStruct):
    __slots__ = ("key", "columns")
    thrift_spec = (
        None,
        (1, TType.STRING, "key", "BINARY", None),
        (2, TType.LIST, "columns", (TType.STRUCT, [ColumnOrSuperColumn, None], False), None),
    )


class Deletion(ThriftStruct):
    __slots__ = ("timestamp", "super_column", "predicate")
    thrift_spec = (
        None,
        (1, TType.I64, "timestamp", None, None),
        (2, TType.STRING, "super_column", "BINARY", None),
        (3, TType.STRUCT, "predicate", [SlicePredicate, None], None),
    )


class Mutation(ThriftStruct):
    __slots__ = ("column_or_supercolumn", "deletion")
    thrift_spec = (
        None,
        (1, TType.STRUCT, "column_or_supercolumn", [ColumnOrSuperColumn, None], None),
        (2, TType.STRUCT, "deletion", [Deletion, None], None),
    )


class TokenRange(ThriftStruct):
    __slots__ = ("start_token", "end_token", "endpoints")
    thrift_spec = (
        None,
        (1, TType.STRING, "start_token", "UTF8", None),
        (2, TType.STRING, "end_token", "UTF8", None),
        (3, TType.LIST, "endpoints", (TType.STRING, "UTF8", False), None),
    )


class AuthenticationRequest(ThriftStruct):
    __slots__ = ("credentials",)
    thrift_spec = (
        None,
        (1, TType.MAP, "credentials", (TType.STRING, "UTF8", TType.STRING, "UTF8", False), None),
    )


# ---------------------------------------------------------------------------
# Schema structs
# ---------------------------------------------------------------------------


class ColumnDef(ThriftStruct):
    __slots__ = ("name", "validation_class", "index_type", "index_name")
    thrift_spec = (
        None,
        (1, TType.STRING, "name", "BINARY", None),
        (2, TType.STRING, "validation_class", "UTF8", None),
        (3, TType.I32, "index_type", None, None),
        (4, TType.STRING, "index_name", "UTF8", None),
    )


class CfDef(ThriftStruct):
    __slots__ = (
        "keyspace",
        "name",
        "column_type",
        "comparator_type",
        "subcomparator_type",
        "comment",
        "row_cache_size",
        "key_cache_size",
        "read_repair_chance",
        "column_metadata",
        "gc_grace_seconds",
        "default_validation_class",
        "id",
        "min_compaction_threshold",
        "max_compaction_threshold",
    )
    thrift_spec = (
        None,
        (1, TType.STRING, "keyspace", "UTF8", None),
        (2, TType.STRING, "name", "UTF8", None),
        (3, TType.STRING, "column_type", "UTF8", "Standard"),
        None,
        (5, TType.STRING, "comparator_type", "UTF8", "BytesType"),
        (6, TType.STRING, "subcomparator_type", "UTF8", None),
        None,
        (8, TType.STRING, "comment", "UTF8", None),
        (9, TType.DOUBLE, "row_cache_size", None, 0.0),
        None,
        (11, TType.DOUBLE, "key_cache_size", None, 200000.0),
        (12, TType.DOUBLE, "read_repair_chance", None, 1.0),
        (13, TType.LIST, "column_metadata", (TType.STRUCT, [ColumnDef, None], False), None),
        (14, TType.I32, "gc_grace_seconds", None, None),
        (15, TType.STRING, "default_validation_class", "UTF8", None),
        (16, TType.I32, "id", None, None),
        (17, TType.I32, "min_compaction_threshold", None, None),
        (18, TType.I32, "max_compaction_threshold", None, None),
    )


class KsDef(ThriftStruct):
    __slots__ = ("name", "strategy_class", "strategy_options", "replication_factor", "cf_defs")
    thrift_spec = (
        None,
        (1, TType.STRING, "name", "UTF8", None),
        (2, TType.STRING, "strategy_class", "UTF8", None),
        (
            3,
            TType.MAP,
            "strategy_options",
            (TType.STRING, "UTF8", TType.STRING, "UTF8", False),
            None,
        ),
        (4, TType.I32, "replication_factor", None, None),
        (5, TType.LIST, "cf_defs", (TType.STRUCT, [CfDef, None], False), None),
    )


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class NotFoundException(ThriftException):
    """The requested row or column does not exist."""

    __slots__ = ()
    thrift_spec = (None,)


class InvalidRequestException(ThriftException):
    """The request was malformed (unknown family, bad predicate, ...)."""

    __slots__ = ("why",)
    thrift_spec = (
        None,
        (1, TType.STRING, "why", "UTF8", None),
    )


class UnavailableException(ThriftException):
    """Not enough replicas are alive to satisfy the consistency level."""

    __slots__ = ()
    thrift_spec = (None,)


class TimedOutException(ThriftException):
    """Replicas did not answer within the server-side RPC timeout."""

    __slots__ = ()
    thrift_spec = (None,)


class AuthenticationException(ThriftException):
    __slots__ = ("why",)
    thrift_spec = (
        None,
        (1, TType.STRING, "why", "UTF8", None),
    )


class AuthorizationException(ThriftException):
    __slots__ = ("why",)
    thrift_spec = (
        None,
        (1, TType.STRING, "why", "UTF8", None),
    )
