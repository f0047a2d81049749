"""
Bounded retry with backoff for storage operations
"""
import asyncio
from typing import Awaitable, Callable, Tuple, Type, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when every attempt failed with a retryable error"""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")


def linear_backoff(base_seconds: float) -> Callable[[int], float]:
    """Delay before retry n is n * base_seconds"""
    def backoff(attempt: int) -> float:
        return base_seconds * attempt
    return backoff


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    backoff: Callable[[int], float],
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    give_up_on: Tuple[Type[BaseException], ...] = (),
    operation_name: str = "operation",
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total attempts including the first one
        backoff: Maps the failed attempt number (1-based) to a delay in seconds
        retry_on: Exceptions that trigger another attempt
        give_up_on: Exceptions re-raised immediately, checked before retry_on

    Raises:
        RetryExhaustedError: every attempt failed with a retryable error
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except give_up_on:
            raise
        except retry_on as e:
            if attempt >= max_attempts:
                logger.error(
                    "retries_exhausted",
                    operation=operation_name,
                    attempts=attempt,
                    error=str(e),
                )
                raise RetryExhaustedError(attempt, e) from e

            delay = backoff(attempt)
            logger.warning(
                "retrying_operation",
                operation=operation_name,
                attempt=attempt,
                max_attempts=max_attempts,
                delay=delay,
                error=str(e),
            )
            await asyncio.sleep(delay)
