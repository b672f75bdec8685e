"""Tests for ConnectionManager (mocked transport and stub)."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import MagicMock, call, patch

import pytest
from thrift.protocol.TProtocol import TProtocolException
from thrift.Thrift import TApplicationException
from thrift.transport.TTransport import TTransportException

from cassandra_lite.connection import (
    ConnectionManager,
    ConnectionState,
    Endpoint,
    default_stub_factory,
    default_transport_factory,
)
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


def _manager(
    endpoint: Endpoint, transport: Any, stub: Any, **kwargs: Any
) -> ConnectionManager:
    return ConnectionManager(
        endpoint,
        transport_factory=lambda _endpoint: transport,
        stub_factory=lambda _transport: stub,
        **kwargs,
    )


class TestEndpoint:
    def test_defaults(self) -> None:
        endpoint = Endpoint()
        assert endpoint.address == "127.0.0.1:9160"
        assert endpoint.username == ""

    def test_password_not_in_repr(self, endpoint: Endpoint) -> None:
        assert "s3cret" not in repr(endpoint)

    def test_immutable(self, endpoint: Endpoint) -> None:
        with pytest.raises(AttributeError):
            endpoint.host = "other"  # type: ignore[misc]

    def test_from_config(self, default_config: Any) -> None:
        endpoint = Endpoint.from_config(default_config)
        assert endpoint == Endpoint("127.0.0.1", 9160, "", "")


class TestLazyConnect:
    def test_starts_unconnected(self, connection: ConnectionManager, mock_transport: MagicMock) -> None:
        assert connection.state is ConnectionState.UNCONNECTED
        assert connection.is_connected is False
        mock_transport.open.assert_not_called()

    def test_stub_access_connects_once(
        self, connection: ConnectionManager, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        assert connection.stub is mock_stub
        assert connection.stub is mock_stub
        mock_transport.open.assert_called_once_with()
        mock_stub.login.assert_called_once()
        assert connection.state is ConnectionState.READY

    def test_connect_is_idempotent(
        self, connection: ConnectionManager, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        first = connection.connect()
        second = connection.connect()
        assert first is second is mock_stub
        assert mock_transport.open.call_count == 1
        assert mock_stub.login.call_count == 1

    def test_login_sends_credentials(
        self, connection: ConnectionManager, mock_stub: MagicMock
    ) -> None:
        connection.connect()
        (auth_request,), _ = mock_stub.login.call_args
        assert isinstance(auth_request, AuthenticationRequest)
        assert auth_request.credentials == {"username": "alice", "password": "s3cret"}

    def test_connect_order(self, endpoint: Endpoint) -> None:
        parent = MagicMock()
        manager = _manager(endpoint, parent.transport, parent.stub, keyspace="Keyspace1")
        manager.connect()
        assert parent.mock_calls == [
            call.transport.open(),
            call.stub.login(parent.stub.login.call_args.args[0]),
            call.stub.set_keyspace("Keyspace1"),
        ]

    def test_logs_connect(
        self, connection: ConnectionManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="cassandra_lite"):
            connection.connect()
        assert "Connected to db1:9160" in caplog.text


class TestConnectFailures:
    def test_transport_error_becomes_connection_error(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        mock_transport.open.side_effect = TTransportException(message="refused")
        with pytest.raises(ClientConnectionError, match="db1:9160") as excinfo:
            connection.connect()
        assert isinstance(excinfo.value.__cause__, TTransportException)
        assert connection.state is ConnectionState.FAILED
        mock_transport.close.assert_called_once_with()

    def test_socket_error_becomes_connection_error(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        mock_transport.open.side_effect = ConnectionRefusedError("refused")
        with pytest.raises(ClientConnectionError):
            connection.connect()

    @pytest.mark.parametrize("error_cls", [AuthenticationException, AuthorizationException])
    def test_login_rejection(
        self,
        connection: ConnectionManager,
        mock_transport: MagicMock,
        mock_stub: MagicMock,
        error_cls: type,
    ) -> None:
        mock_stub.login.side_effect = error_cls(why="bad password")
        with pytest.raises(AuthenticationError, match="bad password"):
            connection.connect()
        assert connection.state is ConnectionState.FAILED
        mock_transport.close.assert_called_once_with()

    def test_authentication_error_is_connection_error(self) -> None:
        assert issubclass(AuthenticationError, ClientConnectionError)

    def test_failed_connect_is_not_retried_implicitly(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        mock_transport.open.side_effect = TTransportException(message="refused")
        with pytest.raises(ClientConnectionError):
            _ = connection.stub
        with pytest.raises(NotConnectedError, match="connect\\(\\)") as excinfo:
            _ = connection.stub
        assert isinstance(excinfo.value.__cause__, ClientConnectionError)
        assert mock_transport.open.call_count == 1

    def test_explicit_connect_after_failure(
        self, connection: ConnectionManager, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        mock_transport.open.side_effect = [TTransportException(message="refused"), None]
        with pytest.raises(ClientConnectionError):
            connection.connect()
        assert connection.connect() is mock_stub
        assert connection.state is ConnectionState.READY
        assert connection.stub is mock_stub

    @pytest.mark.parametrize(
        "error",
        [
            TApplicationException(TApplicationException.UNKNOWN_METHOD, "Invalid method name"),
            TProtocolException(TProtocolException.INVALID_DATA, "bad reply"),
        ],
    )
    def test_unexpected_login_error_propagates_and_fails(
        self,
        connection: ConnectionManager,
        mock_transport: MagicMock,
        mock_stub: MagicMock,
        error: Exception,
    ) -> None:
        mock_stub.login.side_effect = error
        with pytest.raises(type(error)) as excinfo:
            connection.connect()
        assert excinfo.value is error
        assert connection.state is ConnectionState.FAILED
        mock_transport.close.assert_called_once_with()

        with pytest.raises(NotConnectedError, match="connect\\(\\)") as not_connected:
            _ = connection.stub
        assert not_connected.value.__cause__ is error

    def test_unexpected_error_is_not_retried(
        self, endpoint: Endpoint, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        policy = MagicMock()
        policy.next_delay.return_value = 0.0
        mock_transport.open.side_effect = RuntimeError("boom")
        manager = _manager(endpoint, mock_transport, mock_stub, retry_policy=policy)
        with pytest.raises(RuntimeError, match="boom"):
            manager.connect()
        policy.next_delay.assert_not_called()
        assert mock_transport.open.call_count == 1
        assert manager.state is ConnectionState.FAILED

    def test_failures_are_not_logged(
        self,
        connection: ConnectionManager,
        mock_transport: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_transport.open.side_effect = TTransportException(message="refused")
        with caplog.at_level(logging.DEBUG, logger="cassandra_lite"), pytest.raises(
            ClientConnectionError
        ):
            connection.connect()
        assert caplog.records == []


class TestKeyspace:
    def test_pending_keyspace_applied_on_connect(
        self, endpoint: Endpoint, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        manager = _manager(endpoint, mock_transport, mock_stub)
        manager.set_keyspace("Keyspace1")
        mock_stub.set_keyspace.assert_not_called()
        manager.connect()
        mock_stub.set_keyspace.assert_called_once_with("Keyspace1")
        assert manager.keyspace == "Keyspace1"

    def test_change_after_connect_does_not_reconnect(
        self, connection: ConnectionManager, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        connection.connect()
        connection.set_keyspace("Other")
        mock_stub.set_keyspace.assert_called_once_with("Other")
        assert mock_transport.open.call_count == 1
        assert connection.keyspace == "Other"

    def test_rejected_keyspace_keeps_previous(
        self, connection: ConnectionManager, mock_stub: MagicMock
    ) -> None:
        connection.connect()
        connection.set_keyspace("Good")
        mock_stub.set_keyspace.side_effect = InvalidRequestException(why="Keyspace Bad does not exist")
        with pytest.raises(InvalidRequestException):
            connection.set_keyspace("Bad")
        assert connection.keyspace == "Good"
        assert connection.state is ConnectionState.READY

    def test_rejected_pending_keyspace_fails_connect(
        self, endpoint: Endpoint, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        error = InvalidRequestException(why="Keyspace Bad does not exist")
        mock_stub.set_keyspace.side_effect = error
        manager = _manager(endpoint, mock_transport, mock_stub, keyspace="Bad")

        with pytest.raises(InvalidRequestException) as excinfo:
            manager.connect()
        assert excinfo.value is error
        assert manager.state is ConnectionState.FAILED
        assert manager.keyspace is None
        mock_transport.close.assert_called_once_with()

        with pytest.raises(NotConnectedError) as not_connected:
            _ = manager.stub
        assert not_connected.value.__cause__ is error

    def test_reconnect_after_rejected_keyspace_skips_it(
        self, endpoint: Endpoint, mock_transport: MagicMock, mock_stub: MagicMock
    ) -> None:
        mock_stub.set_keyspace.side_effect = InvalidRequestException(why="no such keyspace")
        manager = _manager(endpoint, mock_transport, mock_stub, keyspace="Bad")
        with pytest.raises(InvalidRequestException):
            manager.connect()

        assert manager.connect() is mock_stub
        assert manager.state is ConnectionState.READY
        mock_stub.set_keyspace.assert_called_once_with("Bad")


class TestClose:
    def test_close_closes_transport(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        connection.connect()
        connection.close()
        mock_transport.close.assert_called_once_with()
        assert connection.state is ConnectionState.CLOSED

    def test_close_is_idempotent(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        connection.connect()
        connection.close()
        connection.close()
        mock_transport.close.assert_called_once_with()

    def test_close_before_connect(
        self, connection: ConnectionManager, mock_transport: MagicMock
    ) -> None:
        connection.close()
        mock_transport.close.assert_not_called()
        assert connection.state is ConnectionState.CLOSED

    def test_use_after_close(self, connection: ConnectionManager) -> None:
        connection.connect()
        connection.close()
        with pytest.raises(NotConnectedError, match="closed"):
            _ = connection.stub
        with pytest.raises(NotConnectedError, match="closed"):
            connection.connect()


class TestHealthCheck:
    def test_fields(self, connection: ConnectionManager) -> None:
        health = connection.health_check()
        assert health == {
            "endpoint": "db1:9160",
            "state": "unconnected",
            "keyspace": None,
            "authenticated": True,
        }

    def test_no_password_leak(self, connection: ConnectionManager) -> None:
        connection.connect()
        assert "s3cret" not in str(connection.health_check())


class TestDefaultFactories:
    def test_transport_is_framed_socket(self) -> None:
        with patch("cassandra_lite.connection.TSocket.TSocket") as socket_cls, patch(
            "cassandra_lite.connection.TTransport.TFramedTransport"
        ) as framed_cls:
            transport = default_transport_factory(Endpoint("db1", 9161))
        socket_cls.assert_called_once_with("db1", 9161)
        framed_cls.assert_called_once_with(socket_cls.return_value)
        assert transport is framed_cls.return_value

    def test_stub_uses_binary_protocol(self) -> None:
        stub = default_stub_factory(MagicMock())
        assert isinstance(stub, CassandraClient)
