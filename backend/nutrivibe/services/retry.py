"""Retry policy for upstream LLM calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import httpx
import openai

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 408 timeout, 409 conflict, 429 rate limited; every 5xx is retried too
RETRYABLE_STATUS_CODES = frozenset({408, 409, 429})


def is_retryable_error(error: BaseException) -> bool:
    """Classify an upstream error as transient (retry) or terminal (give up)."""
    if isinstance(error, openai.APIConnectionError):  # includes APITimeoutError
        return True
    if isinstance(error, openai.APIStatusError):
        return error.status_code in RETRYABLE_STATUS_CODES or error.status_code >= 500
    if isinstance(error, httpx.TransportError):
        return True
    return False


@dataclass
class RetryPolicy:
    """Run an async operation with linear backoff.

    Attempt n (1-based) that fails with a retryable error waits
    delay_seconds * n before attempt n + 1. Terminal errors are raised
    immediately; after the last attempt the last error is raised.
    """

    attempts: int = 3
    delay_seconds: float = 1.0
    classifier: Callable[[BaseException], bool] = is_retryable_error

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")

    def backoff(self, attempt: int) -> float:
        return self.delay_seconds * attempt

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "operation",
    ) -> tuple[T, int]:
        """Return (result, attempts_used)."""
        last_error: BaseException | None = None

        for attempt in range(1, self.attempts + 1):
            try:
                return await operation(), attempt
            except Exception as e:
                last_error = e
                if not self.classifier(e):
                    logger.warning(f"{description} failed with a terminal error: {e}")
                    raise

                logger.warning(f"{description} attempt {attempt}/{self.attempts} failed: {e}")
                if attempt < self.attempts:
                    delay = self.backoff(attempt)
                    logger.info(f"Retrying {description} in {delay:.1f}s")
                    await asyncio.sleep(delay)

        raise last_error
