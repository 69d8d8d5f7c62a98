"""
Retry framework for transient per-source failures.
"""

from ccumd.retry.manager import RetryManager
from ccumd.retry.policy import NO_RETRY_POLICY, RetryPolicy, RetryState

__all__ = [
    "NO_RETRY_POLICY",
    "RetryManager",
    "RetryPolicy",
    "RetryState",
]
