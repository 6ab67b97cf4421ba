"""API resilience utilities for dex-access.

This module provides the bounded exponential-backoff retry policy that wraps
every raw fetch and every listing batch request.
"""

from __future__ import annotations

import functools
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from dex_access.core.config import RetryConfig
from dex_access.core.constants import DEFAULT_RETRY
from dex_access.core.exceptions import RetryableHTTPError, RetryExhaustedError

T = TypeVar("T")

# Exceptions that should trigger a retry (transient errors)
RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    OSError,  # Includes network-related errors
    httpx.TransportError,  # Connect/read timeouts, refused connections, protocol errors
    RetryableHTTPError,  # Custom exception for HTTP status codes
)


@dataclass(frozen=True)
class RetryAttempt:
    """One failed attempt within a single call.

    Attributes:
        attempt_number: 1-based number of the attempt that just failed
        next_wait: Seconds to wait before the next attempt
        elapsed_total: Seconds since the first attempt started
    """

    attempt_number: int
    next_wait: float
    elapsed_total: float


class RetryPolicy:
    """
    Bounded exponential-backoff retry around a fallible operation.

    Backoff Formula:
        wait(n) = min(base_delay * exponential_base ** (n - 1), max_delay)
        if jitter: wait(n) = wait(n) * random.uniform(0.5, 1.5)

    A retry is only taken when elapsed + wait(n) stays within max_elapsed;
    otherwise the call fails with RetryExhaustedError wrapping the last error.
    Exceptions outside retryable_exceptions propagate untouched on first sight.

    Thread Safety:
    - Holds no per-call state; every call() runs its own attempt sequence
    - The backoff wait blocks only the calling thread

    Example:
        policy = RetryPolicy(RetryConfig(base_delay=1.0, max_elapsed=10.0))
        species = policy.call(client.get_pokemon_species, 215, operation_name="species #215")
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        retryable_exceptions: tuple[type[BaseException], ...] | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or DEFAULT_RETRY
        self.retryable_exceptions = (
            retryable_exceptions if retryable_exceptions is not None else RETRYABLE_EXCEPTIONS
        )
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep
        self._clock = clock

    def delay_for(self, attempt_number: int) -> float:
        """Return the un-jittered wait after the given failed attempt (1-based)."""
        cfg = self.config
        return min(cfg.base_delay * (cfg.exponential_base ** (attempt_number - 1)), cfg.max_delay)

    def call(
        self,
        operation: Callable[..., T],
        *args: Any,
        operation_name: str | None = None,
        on_retry: Callable[[RetryAttempt], None] | None = None,
        **kwargs: Any,
    ) -> T:
        """
        Execute operation(*args, **kwargs) with retries.

        Args:
            operation: The callable to run
            *args: Positional arguments for the operation
            operation_name: Human-readable name for logs and errors
            on_retry: Optional callback invoked with each RetryAttempt before sleeping
            **kwargs: Keyword arguments for the operation

        Returns:
            The operation's result from the first successful attempt

        Raises:
            RetryExhaustedError: If transient failures outlast the time budget
            Any non-retryable exception raised by the operation
        """
        name = operation_name or getattr(operation, "__name__", "operation")
        started = self._clock()
        attempt_number = 0

        while True:
            attempt_number += 1
            try:
                result = operation(*args, **kwargs)
            except self.retryable_exceptions as e:
                elapsed = self._clock() - started
                wait = self.delay_for(attempt_number)
                if self.config.jitter:
                    wait = wait * random.uniform(0.5, 1.5)

                if elapsed + wait > self.config.max_elapsed:
                    self.logger.debug(f"All {attempt_number} attempt(s) failed for {name} ({elapsed:.1f}s elapsed)")
                    raise RetryExhaustedError(name, attempt_number, elapsed, e) from e

                attempt = RetryAttempt(attempt_number=attempt_number, next_wait=wait, elapsed_total=elapsed)
                if on_retry is not None:
                    on_retry(attempt)
                self.logger.warning(f"⚠ {name} attempt {attempt_number} failed: {e!s}. Retrying in {wait:.1f}s...")
                self._sleep(wait)
                continue

            if attempt_number > 1:
                self.logger.info(f"✓ {name} succeeded on attempt {attempt_number}")
            return result

    def wrap(self, func: Callable[..., T], operation_name: str | None = None) -> Callable[..., T]:
        """Return func wrapped so every call goes through this policy."""

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return self.call(func, *args, operation_name=operation_name or func.__name__, **kwargs)

        return wrapper

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        """
        Use as a decorator for functions.

        Example:
            @policy
            def fetch_nature(nature_id):
                return client.get_nature(nature_id)
        """
        return self.wrap(func)

    def __repr__(self) -> str:
        return f"RetryPolicy({self.config.to_dict()})"
