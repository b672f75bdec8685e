"""Connect retry policies.

A :class:`RetryPolicy` is consulted by
:class:`~cassandra_lite.connection.ConnectionManager` after each failed
connect attempt. The default :class:`NoRetryPolicy` never retries, so a
connect failure reaches the caller after a single attempt. Only connecting
is retried; RPC calls never are.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class RetryPolicy(ABC):
    """Decides whether and when a failed connect attempt is repeated."""

    @abstractmethod
    def next_delay(self, attempt: int, error: Exception) -> float | None:
        """Return the delay in seconds before the next attempt.

        Args:
            attempt: Number of attempts made so far (1 after the first failure).
            error: The error raised by the last attempt.

        Returns:
            Seconds to sleep before retrying, or ``None`` to give up and
            raise *error*.
        """


class NoRetryPolicy(RetryPolicy):
    """Never retries."""

    def next_delay(self, attempt: int, error: Exception) -> float | None:
        return None
