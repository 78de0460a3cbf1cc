"""Error boundary for LSP feature handlers."""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


def guard_handler(
    *,
    logger: logging.Logger,
    feature_name: str,
    default_factory: Callable[[], Any] = lambda: None,
) -> Callable[[F], F]:
    """
    Decorator that keeps a failing LSP handler from taking the server down.

    Works for both plain and ``async`` handlers. Unexpected exceptions are
    logged with their traceback and replaced by ``default_factory()``.
    ``asyncio.CancelledError`` is always re-raised so request cancellation
    keeps working.

    Args:
        logger: Logger instance for error logging.
        feature_name: LSP method name used in the log message.
        default_factory: Callable that returns the value sent back on error.

    Returns:
        Decorator function.
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Error in %s handler", feature_name)
                    return default_factory()

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception("Error in %s handler", feature_name)
                return default_factory()

        return wrapper  # type: ignore[return-value]

    return decorator
