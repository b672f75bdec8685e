"""Connection management: one lazily opened, authenticated Thrift connection.

The connect sequence is built explicitly, once, in :meth:`ConnectionManager.connect`:

1. socket + framed transport (``transport_factory``)
2. binary protocol + service stub (``stub_factory``)
3. ``transport.open()``
4. ``login()`` with the endpoint credentials
5. ``set_keyspace()`` if a keyspace was selected before connecting

The connection only becomes READY once every step succeeded. Any failure
closes the transport and leaves the manager FAILED.

State transitions are driven only by ``connect()`` and ``close()``::

    UNCONNECTED -> CONNECTING -> READY
                   CONNECTING -> FAILED -> (connect()) -> CONNECTING
    any state   -> CLOSED

A failed connect is never retried implicitly: after a failure, accessing
:attr:`ConnectionManager.stub` raises ``NotConnectedError`` until
``connect()`` is called again.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from thrift.protocol import TBinaryProtocol
from thrift.transport import TSocket, TTransport

from cassandra_lite.exceptions import (
    AuthenticationError,
    ClientConnectionError,
    NotConnectedError,
)
from cassandra_lite.protocol.cassandra import CassandraClient
from cassandra_lite.protocol.ttypes import (
    AuthenticationException,
    AuthenticationRequest,
    AuthorizationException,
    InvalidRequestException,
)
from cassandra_lite.retry import NoRetryPolicy, RetryPolicy

if TYPE_CHECKING:
    from cassandra_lite.config import CassandraLiteConfig

logger = logging.getLogger("cassandra_lite")


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Connection target and credentials.

    Attributes:
        host: Server host name or address.
        port: Thrift RPC port.
        username: Login user name.
        password: Login password (excluded from ``repr()``).
    """

    host: str = "127.0.0.1"
    port: int = 9160
    username: str = ""
    password: str = field(default="", repr=False)

    @classmethod
    def from_config(cls, config: CassandraLiteConfig) -> Endpoint:
        return cls(
            host=config.server_name,
            port=config.server_port,
            username=config.username,
            password=config.password,
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class ConnectionState(str, enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


def default_transport_factory(endpoint: Endpoint) -> TTransport.TTransportBase:
    """Build a framed transport over a plain TCP socket."""
    socket = TSocket.TSocket(endpoint.host, endpoint.port)
    return TTransport.TFramedTransport(socket)


def default_stub_factory(transport: TTransport.TTransportBase) -> CassandraClient:
    """Build a Cassandra stub speaking the binary protocol over *transport*."""
    return CassandraClient(TBinaryProtocol.TBinaryProtocol(transport))


class ConnectionManager:
    """Owns the single connection of a client.

    Args:
        endpoint: Where to connect and which credentials to send.
        keyspace: Keyspace to select as part of the connect sequence.
        transport_factory: Builds an unopened transport for the endpoint.
        stub_factory: Builds the service stub on top of the transport.
        retry_policy: Consulted after each failed connect attempt.
            Defaults to :class:`~cassandra_lite.retry.NoRetryPolicy`.
        sleep: Called with the policy's delay between attempts.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        *,
        keyspace: str | None = None,
        transport_factory: Callable[[Endpoint], Any] | None = None,
        stub_factory: Callable[[Any], Any] | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._endpoint = endpoint
        self._keyspace = keyspace
        self._transport_factory = transport_factory or default_transport_factory
        self._stub_factory = stub_factory or default_stub_factory
        self._retry_policy = retry_policy or NoRetryPolicy()
        self._sleep = sleep

        self._state = ConnectionState.UNCONNECTED
        self._transport: Any | None = None
        self._stub: Any | None = None
        self._last_error: Exception | None = None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def keyspace(self) -> str | None:
        """The selected keyspace (applied, or pending until connect)."""
        return self._keyspace

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.READY

    @property
    def stub(self) -> Any:
        """The live service stub, connecting first if never attempted.

        Raises:
            ClientConnectionError: If the lazy connect fails.
            NotConnectedError: If a previous connect failed or the
                connection was closed.
        """
        if self._state is ConnectionState.READY:
            return self._stub
        if self._state is ConnectionState.UNCONNECTED:
            return self.connect()
        if self._state is ConnectionState.FAILED:
            raise NotConnectedError(
                f"Previous connect to {self._endpoint.address} failed; "
                f"call connect() to try again"
            ) from self._last_error
        raise NotConnectedError(f"Connection to {self._endpoint.address} is {self._state.value}")

    def connect(self) -> Any:
        """Open the connection if needed and return the stub.

        Idempotent: returns the existing stub when already connected.

        Returns:
            The authenticated service stub.

        Raises:
            ClientConnectionError: If the transport cannot be opened.
            AuthenticationError: If the login is rejected.
            NotConnectedError: If the connection was closed.
        """
        if self._state is ConnectionState.READY:
            return self._stub
        if self._state is ConnectionState.CLOSED:
            raise NotConnectedError(f"Connection to {self._endpoint.address} is closed")

        attempt = 0
        while True:
            attempt += 1
            self._state = ConnectionState.CONNECTING
            try:
                transport, stub = self._open()
            except ClientConnectionError as exc:
                delay = self._retry_policy.next_delay(attempt, exc)
                if delay is None:
                    self._fail(exc)
                    raise
                logger.warning(
                    "Connect attempt %d to %s failed, retrying in %.2fs: %s",
                    attempt,
                    self._endpoint.address,
                    delay,
                    exc,
                )
                self._sleep(delay)
                continue
            except Exception as exc:
                self._fail(exc)
                raise
            break

        self._transport = transport
        self._stub = stub
        self._last_error = None
        self._state = ConnectionState.READY
        logger.info("Connected to %s", self._endpoint.address)
        return stub

    def _fail(self, error: Exception) -> None:
        self._state = ConnectionState.FAILED
        self._last_error = error

    def _open(self) -> tuple[Any, Any]:
        """Run one connect attempt; the transport is closed if it fails."""
        transport = self._transport_factory(self._endpoint)
        stub = self._stub_factory(transport)
        try:
            self._handshake(transport, stub)
        except Exception:
            transport.close()
            raise
        return transport, stub

    def _handshake(self, transport: Any, stub: Any) -> None:
        """Open *transport*, log in and select the pending keyspace.

        A keyspace rejected here is dropped, so the next ``connect()`` does
        not select it again.
        """
        try:
            transport.open()
            stub.login(
                AuthenticationRequest(
                    credentials={
                        "username": self._endpoint.username,
                        "password": self._endpoint.password,
                    }
                )
            )
        except (AuthenticationException, AuthorizationException) as exc:
            raise AuthenticationError(
                f"Login to {self._endpoint.address} as {self._endpoint.username!r} "
                f"rejected: {exc.why}"
            ) from exc
        except (TTransport.TTransportException, OSError) as exc:
            raise ClientConnectionError(
                f"Cannot connect to {self._endpoint.address}: {exc}"
            ) from exc

        if self._keyspace is None:
            return
        try:
            stub.set_keyspace(self._keyspace)
        except InvalidRequestException:
            self._keyspace = None
            raise
        except (TTransport.TTransportException, OSError) as exc:
            raise ClientConnectionError(
                f"Cannot connect to {self._endpoint.address}: {exc}"
            ) from exc
        logger.debug("Keyspace set to %r on %s", self._keyspace, self._endpoint.address)

    def set_keyspace(self, keyspace: str) -> None:
        """Select *keyspace* on the current connection.

        When connected, issues one ``set_keyspace`` call without reconnecting.
        Otherwise the name is kept and applied by the next ``connect()``.
        The stored name only changes once the server accepts it.
        """
        if self._state is ConnectionState.READY:
            self._stub.set_keyspace(keyspace)
            logger.debug("Keyspace set to %r on %s", keyspace, self._endpoint.address)
        self._keyspace = keyspace

    def close(self) -> None:
        """Close the transport. Further use raises ``NotConnectedError``."""
        if self._state is ConnectionState.CLOSED:
            return
        transport, self._transport = self._transport, None
        self._stub = None
        self._state = ConnectionState.CLOSED
        if transport is not None:
            transport.close()
            logger.info("Closed connection to %s", self._endpoint.address)

    def health_check(self) -> dict[str, Any]:
        """Return connection status.

        The password is never included. Only a boolean ``authenticated``
        flag indicates whether a user name is configured.
        """
        return {
            "endpoint": self._endpoint.address,
            "state": self._state.value,
            "keyspace": self._keyspace,
            "authenticated": bool(self._endpoint.username),
        }
