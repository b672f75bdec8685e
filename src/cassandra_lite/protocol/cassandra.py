"""Client stub for the Cassandra 0.7 Thrift service.

Each RPC is described once in ``_METHODS`` by the field specs of its
argument and result structs. :class:`CassandraClient` performs the standard
Thrift call cycle for every method: write a CALL message with the argument
struct, flush, read the REPLY, then either return ``result.success`` or raise
the first declared exception that the server filled in. A reply with the
wrong message type, method name or sequence id raises
``TApplicationException``.
"""

from __future__ import annotations

from typing import Any

from thrift.Thrift import TApplicationException, TMessageType, TType

from cassandra_lite.protocol.ttypes import (
    AuthenticationException,
    AuthenticationRequest,
    AuthorizationException,
    Column,
    ColumnOrSuperColumn,
    ColumnParent,
    ColumnPath,
    IndexClause,
    InvalidRequestException,
    KeyRange,
    KeySlice,
    KsDef,
    Mutation,
    NotFoundException,
    SlicePredicate,
    ThriftStruct,
    TimedOutException,
    TokenRange,
    UnavailableException,
)

# Reusable field specs.
_KEY = (TType.STRING, "key", "BINARY", None)
_KEYS = (TType.LIST, "keys", (TType.STRING, "BINARY", False), None)
_PARENT = (TType.STRUCT, "column_parent", [ColumnParent, None], None)
_PATH = (TType.STRUCT, "column_path", [ColumnPath, None], None)
_PREDICATE = (TType.STRUCT, "predicate", [SlicePredicate, None], None)
_LEVEL = (TType.I32, "consistency_level", None, 1)
_KEYSPACE = (TType.STRING, "keyspace", "UTF8", None)

_IRE = (TType.STRUCT, "ire", [InvalidRequestException, None], None)
_NFE = (TType.STRUCT, "nfe", [NotFoundException, None], None)
_UE = (TType.STRUCT, "ue", [UnavailableException, None], None)
_TE = (TType.STRUCT, "te", [TimedOutException, None], None)
_AUTHNX = (TType.STRUCT, "authnx", [AuthenticationException, None], None)
_AUTHZX = (TType.STRUCT, "authzx", [AuthorizationException, None], None)

_COSC_LIST = (TType.STRUCT, [ColumnOrSuperColumn, None], False)
_STRING = (TType.STRING, "UTF8")


def _numbered(fields: tuple[tuple[Any, ...], ...], first_id: int) -> tuple[Any, ...]:
    """Build a ``thrift_spec`` tuple from field specs, assigning ids in order."""
    spec: list[Any] = [None] * first_id
    for offset, field in enumerate(fields):
        spec.append((first_id + offset, *field))
    return tuple(spec)


def _struct_class(name: str, thrift_spec: tuple[Any, ...]) -> type[ThriftStruct]:
    slots = tuple(field[2] for field in thrift_spec if field is not None)
    return type(name, (ThriftStruct,), {"__slots__": slots, "thrift_spec": thrift_spec})


def _method(
    name: str,
    args: tuple[tuple[Any, ...], ...],
    success: tuple[Any, ...] | None,
    exceptions: tuple[tuple[Any, ...], ...],
) -> tuple[type[ThriftStruct], type[ThriftStruct]]:
    """Create the ``<name>_args`` and ``<name>_result`` structs of one RPC."""
    args_cls = _struct_class(f"{name}_args", _numbered(args, 1))
    result_spec = list(_numbered(exceptions, 1))
    if success is not None:
        result_spec[0] = (0, success[0], "success", success[1], None)
    result_cls = _struct_class(f"{name}_result", tuple(result_spec))
    return args_cls, result_cls


_METHODS: dict[str, tuple[type[ThriftStruct], type[ThriftStruct]]] = {
    "login": _method(
        "login",
        ((TType.STRUCT, "auth_request", [AuthenticationRequest, None], None),),
        None,
        (_AUTHNX, _AUTHZX),
    ),
    "set_keyspace": _method("set_keyspace", (_KEYSPACE,), None, (_IRE,)),
    "get": _method(
        "get",
        (_KEY, _PATH, _LEVEL),
        (TType.STRUCT, [ColumnOrSuperColumn, None]),
        (_IRE, _NFE, _UE, _TE),
    ),
    "get_slice": _method(
        "get_slice",
        (_KEY, _PARENT, _PREDICATE, _LEVEL),
        (TType.LIST, _COSC_LIST),
        (_IRE, _UE, _TE),
    ),
    "get_count": _method(
        "get_count",
        (_KEY, _PARENT, _PREDICATE, _LEVEL),
        (TType.I32, None),
        (_IRE, _UE, _TE),
    ),
    "multiget_slice": _method(
        "multiget_slice",
        (_KEYS, _PARENT, _PREDICATE, _LEVEL),
        (TType.MAP, (TType.STRING, "BINARY", TType.LIST, _COSC_LIST, False)),
        (_IRE, _UE, _TE),
    ),
    "multiget_count": _method(
        "multiget_count",
        (_KEYS, _PARENT, _PREDICATE, _LEVEL),
        (TType.MAP, (TType.STRING, "BINARY", TType.I32, None, False)),
        (_IRE, _UE, _TE),
    ),
    "get_range_slices": _method(
        "get_range_slices",
        (_PARENT, _PREDICATE, (TType.STRUCT, "range", [KeyRange, None], None), _LEVEL),
        (TType.LIST, (TType.STRUCT, [KeySlice, None], False)),
        (_IRE, _UE, _TE),
    ),
    "get_indexed_slices": _method(
        "get_indexed_slices",
        (
            _PARENT,
            (TType.STRUCT, "index_clause", [IndexClause, None], None),
            (TType.STRUCT, "column_predicate", [SlicePredicate, None], None),
            _LEVEL,
        ),
        (TType.LIST, (TType.STRUCT, [KeySlice, None], False)),
        (_IRE, _UE, _TE),
    ),
    "insert": _method(
        "insert",
        (_KEY, _PARENT, (TType.STRUCT, "column", [Column, None], None), _LEVEL),
        None,
        (_IRE, _UE, _TE),
    ),
    "remove": _method(
        "remove",
        (_KEY, _PATH, (TType.I64, "timestamp", None, None), _LEVEL),
        None,
        (_IRE, _UE, _TE),
    ),
    "batch_mutate": _method(
        "batch_mutate",
        (
            (
                TType.MAP,
                "mutation_map",
                (
                    TType.STRING,
                    "BINARY",
                    TType.MAP,
                    (
                        TType.STRING,
                        "UTF8",
                        TType.LIST,
                        (TType.STRUCT, [Mutation, None], False),
                        False,
                    ),
                    False,
                ),
                None,
            ),
            _LEVEL,
        ),
        None,
        (_IRE, _UE, _TE),
    ),
    "truncate": _method(
        "truncate",
        ((TType.STRING, "cfname", "UTF8", None),),
        None,
        (_IRE, _UE),
    ),
    "describe_keyspaces": _method(
        "describe_keyspaces",
        (),
        (TType.LIST, (TType.STRUCT, [KsDef, None], False)),
        (_IRE,),
    ),
    "describe_keyspace": _method(
        "describe_keyspace",
        (_KEYSPACE,),
        (TType.STRUCT, [KsDef, None]),
        (_NFE, _IRE),
    ),
    "describe_cluster_name": _method("describe_cluster_name", (), _STRING, ()),
    "describe_version": _method("describe_version", (), _STRING, ()),
    "describe_partitioner": _method("describe_partitioner", (), _STRING, ()),
    "describe_snitch": _method("describe_snitch", (), _STRING, ()),
    "describe_ring": _method(
        "describe_ring",
        (_KEYSPACE,),
        (TType.LIST, (TType.STRUCT, [TokenRange, None], False)),
        (_IRE,),
    ),
}

_VOID_METHODS = frozenset(
    name for name, (_, result_cls) in _METHODS.items() if result_cls.thrift_spec[0] is None
)


class CassandraClient:
    """Synchronous stub for the Cassandra service.

    Args:
        iprot: Protocol used to read replies.
        oprot: Protocol used to write calls (defaults to *iprot*).
    """

    def __init__(self, iprot: Any, oprot: Any | None = None) -> None:
        self._iprot = iprot
        self._oprot = oprot if oprot is not None else iprot
        self._seqid = 0

    def _call(self, name: str, **kwargs: Any) -> Any:
        args_cls, result_cls = _METHODS[name]
        self._seqid += 1
        self._oprot.writeMessageBegin(name, TMessageType.CALL, self._seqid)
        args_cls(**kwargs).write(self._oprot)
        self._oprot.writeMessageEnd()
        self._oprot.trans.flush()
        return self._recv(name, result_cls)

    def _recv(self, name: str, result_cls: type[ThriftStruct]) -> Any:
        fname, mtype, seqid = self._iprot.readMessageBegin()
        if mtype == TMessageType.EXCEPTION:
            error = TApplicationException()
            error.read(self._iprot)
            self._iprot.readMessageEnd()
            raise error
        if mtype != TMessageType.REPLY:
            raise TApplicationException(
                TApplicationException.INVALID_MESSAGE_TYPE,
                f"{name} failed: unexpected message type {mtype}",
            )
        if fname != name:
            raise TApplicationException(
                TApplicationException.WRONG_METHOD_NAME,
                f"{name} failed: reply is for {fname}",
            )
        if seqid != self._seqid:
            raise TApplicationException(
                TApplicationException.BAD_SEQUENCE_ID,
                f"{name} failed: reply seqid {seqid}, expected {self._seqid}",
            )
        result = result_cls()
        result.read(self._iprot)
        self._iprot.readMessageEnd()

        for field in result.thrift_spec[1:]:
            if field is not None and getattr(result, field[2]) is not None:
                raise getattr(result, field[2])
        if name in _VOID_METHODS:
            return None
        if result.success is not None:
            return result.success
        raise TApplicationException(
            TApplicationException.MISSING_RESULT, f"{name} failed: unknown result"
        )

    # --- Session ---

    def login(self, auth_request: AuthenticationRequest) -> None:
        self._call("login", auth_request=auth_request)

    def set_keyspace(self, keyspace: str) -> None:
        self._call("set_keyspace", keyspace=keyspace)

    # --- Reads ---

    def get(self, key: bytes, column_path: ColumnPath, consistency_level: int) -> Any:
        return self._call(
            "get", key=key, column_path=column_path, consistency_level=consistency_level
        )

    def get_slice(
        self,
        key: bytes,
        column_parent: ColumnParent,
        predicate: SlicePredicate,
        consistency_level: int,
    ) -> Any:
        return self._call(
            "get_slice",
            key=key,
            column_parent=column_parent,
            predicate=predicate,
            consistency_level=consistency_level,
        )

    def get_count(
        self,
        key: bytes,
        column_parent: ColumnParent,
        predicate: SlicePredicate,
        consistency_level: int,
    ) -> Any:
        return self._call(
            "get_count",
            key=key,
            column_parent=column_parent,
            predicate=predicate,
            consistency_level=consistency_level,
        )

    def multiget_slice(
        self,
        keys: list[bytes],
        column_parent: ColumnParent,
        predicate: SlicePredicate,
        consistency_level: int,
    ) -> Any:
        return self._call(
            "multiget_slice",
            keys=keys,
            column_parent=column_parent,
            predicate=predicate,
            consistency_level=consistency_level,
        )

    def multiget_count(
        self,
        keys: list[bytes],
        column_parent: ColumnParent,
        predicate: SlicePredicate,
        consistency_level: int,
    ) -> Any:
        return self._call(
            "multiget_count",
            keys=keys,
            column_parent=column_parent,
            predicate=predicate,
            consistency_level=consistency_level,
        )

    def get_range_slices(
        self,
        column_parent: ColumnParent,
        predicate: SlicePredicate,
        range: KeyRange,  # noqa: A002 - Thrift field name
        consistency_level: int,
    ) -> Any:
        return self._call(
            "get_range_slices",
            column_parent=column_parent,
            predicate=predicate,
            range=range,
            consistency_level=consistency_level,
        )

    def get_indexed_slices(
        self,
        column_parent: ColumnParent,
        index_clause: IndexClause,
        column_predicate: SlicePredicate,
        consistency_level: int,
    ) -> Any:
        return self._call(
            "get_indexed_slices",
            column_parent=column_parent,
            index_clause=index_clause,
            column_predicate=column_predicate,
            consistency_level=consistency_level,
        )

    # --- Writes ---

    def insert(
        self,
        key: bytes,
        column_parent: ColumnParent,
        column: Column,
        consistency_level: int,
    ) -> None:
        self._call(
            "insert",
            key=key,
            column_parent=column_parent,
            column=column,
            consistency_level=consistency_level,
        )

    def remove(
        self, key: bytes, column_path: ColumnPath, timestamp: int, consistency_level: int
    ) -> None:
        self._call(
            "remove",
            key=key,
            column_path=column_path,
            timestamp=timestamp,
            consistency_level=consistency_level,
        )

    def batch_mutate(
        self, mutation_map: dict[bytes, dict[str, list[Mutation]]], consistency_level: int
    ) -> None:
        self._call(
            "batch_mutate", mutation_map=mutation_map, consistency_level=consistency_level
        )

    def truncate(self, cfname: str) -> None:
        self._call("truncate", cfname=cfname)

    # --- Introspection ---

    def describe_keyspaces(self) -> Any:
        return self._call("describe_keyspaces")

    def describe_keyspace(self, keyspace: str) -> Any:
        return self._call("describe_keyspace", keyspace=keyspace)

    def describe_cluster_name(self) -> Any:
        return self._call("describe_cluster_name")

    def describe_version(self) -> Any:
        return self._call("describe_version")

    def describe_partitioner(self) -> Any:
        return self._call("describe_partitioner")

    def describe_snitch(self) -> Any:
        return self._call("describe_snitch")

    def describe_ring(self, keyspace: str) -> Any:
        return self._call("describe_ring", keyspace=keyspace)
