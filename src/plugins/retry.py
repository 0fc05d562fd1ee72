"""
Bounded fixed-delay retry for GitHub's eventual consistency.

Parallel appliers coordinate only through what GitHub reports, so a lookup
that fails now (parent team not created yet, team mid-rename) may succeed a
few seconds later. The policy is flat: one initial call, then
up to ``RetryConfig.retries`` further calls, each preceded by a sleep of
``RetryConfig.wait_seconds``. No backoff growth, no jitter.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from config import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_fixed_delay(
    operation: Callable[[], Awaitable[T]],
    policy: RetryConfig,
    description: str,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    give_up_on: Tuple[Type[BaseException], ...] = (),
) -> T:
    """
    Call an async operation until it succeeds or the retries run out.

    Args:
        operation: Zero-argument coroutine function to call.
        policy: Retry count and wait between calls.
        description: Label used in retry log lines.
        retry_on: Exception types that trigger another call.
        give_up_on: Exception types raised immediately, checked before
            retry_on so subclasses can be excluded.

    Returns:
        The first successful result.

    Raises:
        The last error once retries are exhausted, or any error not in
        retry_on.
    """
    last_error: BaseException = RuntimeError(f"{description}: no attempt made")

    for attempt in range(policy.retries + 1):
        if attempt:
            logger.warning(
                f"{description}: Retry on {type(last_error).__name__} "
                f"({attempt}/{policy.retries})"
            )
            await asyncio.sleep(policy.wait_seconds)

        try:
            return await operation()
        except give_up_on:
            raise
        except retry_on as e:
            last_error = e

    raise last_error
