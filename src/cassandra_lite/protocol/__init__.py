"""Thrift bindings for the Cassandra 0.7 service interface.

Re-exports the structs, enums and the service stub::

    from cassandra_lite.protocol import CassandraClient, ColumnParent, SlicePredicate
"""

from cassandra_lite.protocol.cassandra import CassandraClient
from cassandra_lite.protocol.ttypes import (
    AuthenticationException,
    AuthenticationRequest,
    AuthorizationException,
    CfDef,
    Column,
    ColumnDef,
    ColumnOrSuperColumn,
    ColumnParent,
    ColumnPath,
    ConsistencyLevel,
    Deletion,
    IndexClause,
    IndexExpression,
    IndexOperator,
    IndexType,
    InvalidRequestException,
    KeyRange,
    KeySlice,
    KsDef,
    Mutation,
    NotFoundException,
    SlicePredicate,
    SliceRange,
    SuperColumn,
    ThriftException,
    ThriftStruct,
    TimedOutException,
    TokenRange,
    UnavailableException,
)

__all__ = [
    "AuthenticationException",
    "AuthenticationRequest",
    "AuthorizationException",
    "CassandraClient",
    "CfDef",
    "Column",
    "ColumnDef",
    "ColumnOrSuperColumn",
    "ColumnParent",
    "ColumnPath",
    "ConsistencyLevel",
    "Deletion",
    "IndexClause",
    "IndexExpression",
    "IndexOperator",
    "IndexType",
    "InvalidRequestException",
    "KeyRange",
    "KeySlice",
    "KsDef",
    "Mutation",
    "NotFoundException",
    "SlicePredicate",
    "SliceRange",
    "SuperColumn",
    "ThriftException",
    "ThriftStruct",
    "TimedOutException",
    "TokenRange",
    "UnavailableException",
]
