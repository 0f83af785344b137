"""Optimistic concurrency helpers for group mutations."""

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

import structlog

from core.config import settings
from core.exceptions import ConcurrentModificationError

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def retry_on_conflict(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Re-run a whole unit-of-work operation when it loses a version race.

    The wrapped coroutine must open its own unit of work so each attempt reads
    the latest group state and re-evaluates every check against it. Only
    ConcurrentModificationError is retried; it is re-raised once
    ``settings.optimistic_retry_attempts`` is exhausted.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        attempts = settings.optimistic_retry_attempts
        attempt = 1
        while True:
            try:
                return await func(*args, **kwargs)
            except ConcurrentModificationError as exc:
                if attempt >= attempts:
                    logger.warning(
                        "optimistic_conflict_exhausted",
                        operation=func.__qualname__,
                        attempts=attempts,
                        details=exc.details,
                    )
                    raise
                logger.info(
                    "optimistic_conflict_retry",
                    operation=func.__qualname__,
                    attempt=attempt,
                    details=exc.details,
                )
                attempt += 1

    return wrapper
