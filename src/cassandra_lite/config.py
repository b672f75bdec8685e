"""Configuration system for cassandra-lite.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (CASSANDRA_LITE_*) -> .env file -> field defaults.

Overrides are applied via resolve_config() which creates a new config
instance without mutating the defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cassandra_lite.exceptions import ConfigValidationError


class CassandraLiteConfig(BaseSettings):
    """Construction-time options for a :class:`~cassandra_lite.client.KeyspaceClient`.

    Resolution order: init kwargs -> env vars (CASSANDRA_LITE_*) -> .env file -> defaults.

    Consistency level names are validated when the client is built, so an
    unknown name surfaces as ``InvalidConsistencyLevelError``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CASSANDRA_LITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Endpoint ---

    server_name: str = Field(
        default="127.0.0.1",
        description="Host name or address of the Thrift RPC endpoint",
    )
    server_port: int = Field(
        default=9160,
        ge=1,
        le=65535,
        description="Thrift RPC port",
    )
    username: str = Field(
        default="",
        description="Login user name (empty with AllowAllAuthenticator)",
    )
    password: str = Field(
        default="",
        description="Login password",
        repr=False,
    )

    # --- Consistency ---

    consistency_level_read: str = Field(
        default="ONE",
        description="Default consistency level for reads",
    )
    consistency_level_write: str = Field(
        default="ONE",
        description="Default consistency level for writes",
    )

    # --- Session ---

    keyspace: str | None = Field(
        default=None,
        description="Keyspace selected right after connecting",
    )


_ALL_FIELDS: frozenset[str] = frozenset(CassandraLiteConfig.model_fields.keys())


def resolve_config(
    defaults: CassandraLiteConfig,
    overrides: dict[str, Any] | None,
) -> CassandraLiteConfig:
    """Create a new config instance merging defaults with overrides.

    Args:
        defaults: The base configuration.
        overrides: Field values to replace, keyed by field name.

    Returns:
        A new CassandraLiteConfig with overrides applied, or *defaults*
        itself when there is nothing to override.

    Raises:
        ConfigValidationError: If a key is unknown or a value fails validation.
    """
    if not overrides:
        return defaults

    unknown = sorted(set(overrides) - _ALL_FIELDS)
    if unknown:
        raise ConfigValidationError(f"Unknown config field(s): {', '.join(unknown)}")

    # model_copy(update=...) skips validation; model_validate runs it.
    merged = defaults.model_dump()
    merged.update(overrides)
    try:
        return CassandraLiteConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc
