"""
Retry with exponential backoff.

Attempts are strictly sequential: each failed attempt completes, is logged and
waited out before the next one starts. Only the final attempt's outcome
reaches the caller, and its exception is raised as-is.
"""

import asyncio
import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar('T')


async def delay(delay_ms: float) -> None:
    """Suspend for ``delay_ms`` milliseconds. Never wakes early."""
    await asyncio.sleep(delay_ms / 1000)


async def _call(func: Callable[[], Union[T, Awaitable[T]]]) -> T:
    result = func()
    if inspect.isawaitable(result):
        return await result
    return result


async def retry(
    func: Callable[[], Union[T, Awaitable[T]]],
    policy: "RetryPolicy",
) -> T:
    """
    Call ``func`` until it succeeds or ``policy.max_attempts`` is used up.

    ``func`` may be a plain callable or return an awaitable. After the failed
    attempt with index i the orchestrator waits
    ``policy.initial_delay_ms * policy.backoff_multiplier ** i`` milliseconds.

    Args:
        func: Zero-argument operation to run
        policy: Attempt budget, backoff parameters and log label

    Returns:
        The first successful result

    Raises:
        Exception: Whatever the last attempt raised, unwrapped
    """
    for attempt in range(policy.max_attempts - 1):
        try:
            return await _call(func)
        except Exception as e:
            delay_ms = policy.delay_for_attempt(attempt)
            logger.info(
                f'Retrying "{policy.label}" after {delay_ms / 1000:.2f}s '
                f'({attempt + 1} of {policy.max_attempts}) due to: {e}'
            )
            await delay(delay_ms)
    return await _call(func)


def with_retry(policy: Optional["RetryPolicy"] = None, **overrides: Any):
    """
    Decorator form of retry() for coroutine functions.

    Args:
        policy: Base policy; defaults to RetryPolicy() labelled with the
            function name
        **overrides: RetryPolicy fields replacing those of the base policy

    Returns:
        Decorated coroutine function
    """
    from dataclasses import replace

    from ..models.config import RetryPolicy

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        base = policy or RetryPolicy(label=func.__name__)
        effective = replace(base, **overrides) if overrides else base

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await retry(lambda: func(*args, **kwargs), effective)
        return wrapper
    return decorator


async def retry_with_defaults(
    func: Callable[[], Union[T, Awaitable[T]]],
    label: str,
) -> T:
    """Run retry() with the configured default policy relabelled to ``label``."""
    from dataclasses import replace

    from ..config import get_config

    policy = replace(get_config().retry, label=label)
    return await retry(func, policy)
