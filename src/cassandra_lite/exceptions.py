"""Exception hierarchy for cassandra-lite.

All exceptions derive from CassandraLiteError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.
Errors reported by the server are raised as the Thrift-declared exception
types in :mod:`cassandra_lite.protocol.ttypes`, which also derive from
:class:`ProtocolError`.
"""


class CassandraLiteError(Exception):
    """Base exception for all cassandra-lite errors."""


class ConfigValidationError(CassandraLiteError):
    """Configuration field validation failed.

    Raised when overrides contain unknown keys or fail type validation.
    """


class InvalidConsistencyLevelError(CassandraLiteError, ValueError):
    """A consistency level name does not match any known level."""


class ClientConnectionError(CassandraLiteError):
    """The transport could not be opened or the login was rejected."""


class AuthenticationError(ClientConnectionError):
    """The server rejected the configured credentials."""


class NotConnectedError(CassandraLiteError):
    """An operation needed the connection but none is usable.

    Raised after a failed connect attempt (until ``connect()`` is called
    again explicitly) and after ``close()``.
    """


class ProtocolError(CassandraLiteError):
    """The server reported a fault for an RPC (unavailable, timeout, ...)."""
