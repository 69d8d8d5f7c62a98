"""
Retry manager for running a callable with exponential backoff.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, TypeVar

from ccumd.exceptions import RetryError
from ccumd.retry.policy import RetryPolicy, RetryState
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.retry.manager")

T = TypeVar("T")


class RetryManager:
    """
    Wraps a sync callable with retry logic based on a RetryPolicy.

    Examples:
        >>> manager = RetryManager(RetryPolicy(max_attempts=2))
        >>> state = RetryState(name="my-laptop")
        >>> outcome = manager.execute(transport.fetch, source, state=state)
        >>> state.total_attempts
        1
    """

    def __init__(self, policy: RetryPolicy | None = None, *, sleep: Callable[[float], Any] = time.sleep):
        """
        Initialize RetryManager.

        Args:
            policy: Retry policy (defaults to RetryPolicy())
            sleep: Sleep function, replaceable in tests
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def execute(
        self,
        func: Callable[..., T],
        *args: Any,
        name: str | None = None,
        state: RetryState | None = None,
        **kwargs: Any,
    ) -> T:
        """
        Execute ``func`` with retry logic.

        Args:
            func: Function to execute
            *args: Positional arguments to pass to func
            name: Name for log lines (defaults to the function name)
            state: Optional RetryState to record into
            **kwargs: Keyword arguments to pass to func

        Returns:
            Result of the first successful execution

        Raises:
            Exception: The final exception after all retries are exhausted
        """
        policy = self.policy
        state = state or RetryState(name=name or getattr(func, "__name__", "call"))

        for attempt in range(policy.max_attempts + 1):
            state.attempt = attempt
            try:
                logger.debug(f"Running {state.name} (attempt {attempt + 1}/{policy.max_attempts + 1})")
                result = func(*args, **kwargs)
            except Exception as e:
                state.record_attempt(exception=e)

                if not policy.should_retry(e, attempt):
                    state.mark_failure(e)
                    if attempt > 0:
                        logger.debug(f"{state.name} failed after {attempt + 1} attempts: {e}")
                    raise

                delay = policy.get_delay(attempt)
                state.record_delay(delay)
                logger.warning(f"{state.name} attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s...")
                self._sleep(delay)
                continue

            state.record_attempt()
            state.mark_success()
            if attempt > 0:
                logger.info(f"{state.name} succeeded after {attempt + 1} attempts")
            return result

        # Unreachable: the last attempt either returns or re-raises
        raise RetryError(f"Retry logic error for {state.name}")
