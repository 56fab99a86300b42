import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import is_rate_limit_error

logger = logging.getLogger("recipe_capture.ai")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay_seconds: float = 2.0

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
        )


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    is_retryable: Callable[[BaseException], bool] = is_rate_limit_error,
    label: str = "AI call",
) -> T:
    """
    Await fn(), retrying with a fixed delay while is_retryable(error) holds.
    The last error is re-raised once attempts run out.
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as e:
            if attempt >= policy.max_attempts or not is_retryable(e):
                raise
            logger.warning(
                f"{label} rate limited (attempt {attempt}/{policy.max_attempts}), "
                f"retrying in {policy.delay_seconds}s"
            )
            await asyncio.sleep(policy.delay_seconds)
