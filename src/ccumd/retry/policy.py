"""
Retry policy for per-source synchronization.

A failed source is retried as a whole: every transport rewrites its local
files from scratch, so a repeat attempt is always safe.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RetryPolicy:
    """
    Configuration for retry behavior when a source fails to sync.

    Implements exponential backoff with jitter.

    Examples:
        >>> # One retry after roughly a second
        >>> policy = RetryPolicy(max_attempts=1)

        >>> # Only retry transfer failures
        >>> policy = RetryPolicy(max_attempts=2, retryable_exceptions=(TransferError,))
    """

    # Maximum number of retry attempts (total executions = max_attempts + 1)
    max_attempts: int = 1

    # Initial delay before first retry (seconds)
    initial_delay: float = 1.0

    # Maximum delay between retries (seconds)
    max_delay: float = 10.0

    # Exponential backoff base (delay = initial_delay * base^attempt)
    exponential_base: float = 2.0

    # Add random jitter (±25% of delay)
    jitter: bool = True

    # Only retry these exception types (None = retry all exceptions)
    retryable_exceptions: tuple[type[BaseException], ...] | None = None

    def __post_init__(self):
        """Validate configuration."""
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be > 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")

    @classmethod
    def from_config(cls, data: dict[str, Any] | None, **overrides: Any) -> RetryPolicy:
        """Build from the ``sync.retry`` config section; unknown keys are ignored."""
        data = data or {}
        kwargs: dict[str, Any] = {}
        for key in ("max_attempts", "initial_delay", "max_delay", "exponential_base", "jitter"):
            if data.get(key) is not None:
                kwargs[key] = data[key]
        kwargs.update(overrides)
        return cls(**kwargs)

    def should_retry(self, exception: BaseException, attempt: int) -> bool:
        """
        Determine if we should retry after this exception.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-indexed)

        Returns:
            True if we should retry, False otherwise
        """
        if attempt >= self.max_attempts:
            return False

        if self.retryable_exceptions is not None:
            return isinstance(exception, self.retryable_exceptions)

        return True

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before next retry using exponential backoff.

        Implements: delay = min(initial_delay * base^attempt, max_delay)
        With optional jitter: delay * random(0.75, 1.25)

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds before next retry
        """
        delay = self.initial_delay * (self.exponential_base**attempt)

        if self.jitter:
            delay *= random.uniform(0.75, 1.25)

        # Cap after jitter so max_delay is a hard upper bound
        return min(delay, self.max_delay)


@dataclass
class RetryState:
    """Retry history for one source, kept for logging and the SyncResult."""

    name: str
    attempt: int = 0
    total_attempts: int = 0
    exceptions: list[dict[str, Any]] = field(default_factory=list)
    delays: list[float] = field(default_factory=list)
    succeeded: bool = False
    final_exception: BaseException | None = None

    def record_attempt(self, exception: BaseException | None = None) -> None:
        """Record an attempt and its result."""
        self.total_attempts += 1
        if exception is not None:
            self.exceptions.append(
                {
                    "attempt": self.attempt,
                    "exception_type": type(exception).__name__,
                    "exception_message": str(exception),
                    "timestamp": time.time(),
                }
            )

    def record_delay(self, delay: float) -> None:
        self.delays.append(delay)

    def mark_success(self) -> None:
        self.succeeded = True

    def mark_failure(self, exception: BaseException) -> None:
        self.succeeded = False
        self.final_exception = exception


NO_RETRY_POLICY = RetryPolicy(max_attempts=0, jitter=False)
