"""Retry logic with exponential backoff for idempotent chain reads."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryConfig:
    """
    Configuration for retry behavior.

    Parameters
    ----------
    max_retries : int
        Maximum number of retry attempts
    base_delay : float
        Initial delay in seconds before first retry
    max_delay : float
        Maximum delay between retries
    exponential_base : float
        Base for exponential backoff calculation

    """

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        exponential_base: float = 2.0,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given retry attempt using exponential backoff.

        Parameters
        ----------
        attempt : int
            Current attempt number (0-indexed)

        Returns
        -------
        float
            Delay in seconds

        """
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


def call_with_retry(
    func: Callable[[], T],
    config: RetryConfig,
    *,
    description: str,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """
    Call ``func`` until it succeeds or retries are exhausted.

    Parameters
    ----------
    func : Callable[[], T]
        Zero-argument callable performing the request
    config : RetryConfig
        Backoff settings
    description : str
        Used in debug logs (e.g. 'ethereum eth_getBalance')
    retry_on : tuple[type[BaseException], ...]
        Exception types that trigger a retry; anything else propagates at once

    Returns
    -------
    T
        Result of the first successful call

    Raises
    ------
    Exception
        The last exception once all attempts fail

    """
    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.debug("%s failed after %d attempts", description, attempt + 1)
                raise

            delay = config.get_delay(attempt)
            logger.debug(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                description,
                attempt + 1,
                config.max_retries + 1,
                delay,
                e,
            )
            time.sleep(delay)

    msg = "unreachable"
    raise AssertionError(msg)
