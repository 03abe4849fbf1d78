"""HTTP client utilities and helpers."""

from asyncio import sleep
from collections.abc import Awaitable, Callable
from functools import wraps

from typing import Any, ParamSpec, TypeVar

import httpx

from solana_exporter.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from solana_exporter.helpers.logging import get_logger


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def backoff_delays(
    max_retries: int, base_delay: float, max_delay: float
) -> list[float]:
    """Pauses taken between consecutive attempts, doubling up to ``max_delay``."""
    return [min(base_delay * 2**n, max_delay) for n in range(max_retries - 1)]


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    retry_on: tuple[type[Exception], ...] = (httpx.HTTPError,),
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Re-run a failing coroutine, pausing longer before each new attempt.

    The wrapped call gets ``max_retries`` attempts in total. Between two
    attempts the wrapper sleeps ``base_delay`` seconds, doubled for every
    further attempt and capped at ``max_delay``. Exceptions outside
    ``retry_on`` are never retried, and once the attempts are used up the
    error of the final attempt is raised unchanged.

    Args:
        max_retries: Total attempts, at least 1 (default: 5)
        base_delay: Pause before the second attempt in seconds (default: 1.0)
        max_delay: Upper bound for any single pause (default: 60.0)
        retry_on: Exception types treated as transient
        log_errors: Whether failed attempts are logged (default: True)

    Returns:
        A decorator for async callables

    Raises:
        ValueError: If max_retries is below 1

    Example:
        ```python
        from solana_exporter.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=4, base_delay=0.5, retry_on=(httpx.TransportError,))
        async def get_slot(client: httpx.AsyncClient, url: str) -> int:
            payload = {"jsonrpc": "2.0", "id": 1, "method": "getSlot"}
            response = await client.post(url, json=payload)
            return response.json()["result"]

        # Connection failures are tried 4 times, pausing 0.5s, 1s and 2s
        ```
    """
    if max_retries < 1:
        msg = "max_retries must be at least 1"
        raise ValueError(msg)

    delays = backoff_delays(max_retries, base_delay, max_delay)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        name = func.__name__

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt, delay in enumerate(delays, start=1):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if log_errors:
                        reason = "timed out" if isinstance(e, httpx.TimeoutException) else e
                        logger.warning(
                            "Attempt %d/%d of %s failed (%s), next try in %.1fs",
                            attempt,
                            max_retries,
                            name,
                            reason,
                            delay,
                        )
                await sleep(delay)

            # Last attempt, no pause after it
            try:
                return await func(*args, **kwargs)
            except retry_on:
                if log_errors:
                    logger.error("Giving up on %s after %d attempts", name, max_retries)
                raise

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from solana_exporter.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            signatures = await rpc.list_signatures(client, wallet)
        ```
    """
    return httpx.AsyncClient(timeout=timeout, **kwargs)


__all__ = [
    "backoff_delays",
    "create_http_client",
    "retry_with_backoff",
]
