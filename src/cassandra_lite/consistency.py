"""Consistency level resolution.

Level names are looked up in a static mapping built from the
:class:`ConsistencyLevel` enum. Names are matched exactly as the protocol
spells them (``"ONE"``, ``"LOCAL_QUORUM"``, ...); anything else raises
:class:`~cassandra_lite.exceptions.InvalidConsistencyLevelError`.
"""

from __future__ import annotations

from typing import Literal, Union

from cassandra_lite.exceptions import InvalidConsistencyLevelError
from cassandra_lite.protocol.ttypes import ConsistencyLevel

LevelLike = Union[str, ConsistencyLevel]
OperationKind = Literal["read", "write"]

DEFAULT_CONSISTENCY_LEVEL = ConsistencyLevel.ONE

_LEVELS_BY_NAME: dict[str, ConsistencyLevel] = {
    level.name: level for level in ConsistencyLevel
}


def parse_consistency_level(level: LevelLike) -> ConsistencyLevel:
    """Map a level name (or an existing level) to :class:`ConsistencyLevel`.

    Args:
        level: Level name such as ``"QUORUM"``, or a ``ConsistencyLevel``.

    Returns:
        The matching enum member.

    Raises:
        InvalidConsistencyLevelError: If *level* names no known level.
    """
    if isinstance(level, ConsistencyLevel):
        return level
    try:
        return _LEVELS_BY_NAME[level]
    except (KeyError, TypeError):
        available = ", ".join(_LEVELS_BY_NAME)
        raise InvalidConsistencyLevelError(
            f"Unknown consistency level: {level!r}. Available: {available}"
        ) from None


class ConsistencyResolver:
    """Holds the read and write defaults and applies per-call overrides.

    Precedence: per-call override, then the default for the operation kind,
    then the protocol default (``ONE``).

    Args:
        read: Default level for reads.
        write: Default level for writes.

    Raises:
        InvalidConsistencyLevelError: If either default is unknown.
    """

    def __init__(
        self,
        read: LevelLike | None = None,
        write: LevelLike | None = None,
    ) -> None:
        self._defaults: dict[str, ConsistencyLevel] = {
            "read": DEFAULT_CONSISTENCY_LEVEL,
            "write": DEFAULT_CONSISTENCY_LEVEL,
        }
        if read is not None:
            self.set_default("read", read)
        if write is not None:
            self.set_default("write", write)

    @property
    def read(self) -> ConsistencyLevel:
        return self._defaults["read"]

    @property
    def write(self) -> ConsistencyLevel:
        return self._defaults["write"]

    def set_default(self, kind: OperationKind, level: LevelLike) -> None:
        """Replace the default level for *kind*, validating it first."""
        self._check_kind(kind)
        self._defaults[kind] = parse_consistency_level(level)

    def resolve(self, kind: OperationKind, override: LevelLike | None = None) -> ConsistencyLevel:
        """Return the effective level for one call.

        Args:
            kind: ``"read"`` or ``"write"``.
            override: Optional per-call level.

        Returns:
            The level to send with the RPC.

        Raises:
            InvalidConsistencyLevelError: If *override* names no known level.
            ValueError: If *kind* is neither ``"read"`` nor ``"write"``.
        """
        self._check_kind(kind)
        if override is not None:
            return parse_consistency_level(override)
        return self._defaults[kind]

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in ("read", "write"):
            raise ValueError(f"Unknown operation kind: {kind!r} (expected 'read' or 'write')")
