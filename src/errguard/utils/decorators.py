"""Decorators that funnel failures through the error manager."""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from errguard.errors.manager import ErrorManager
from errguard.errors.reporting import Reporter, report_if_needed
from errguard.errors.taxonomy import NormalizedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    """Result wrapper: either ``data`` or a normalized ``error``."""

    data: Optional[T] = None
    error: Optional[NormalizedError] = None
    status: int = 200

    @property
    def ok(self) -> bool:
        return self.error is None


def status_for(error: NormalizedError) -> int:
    """HTTP-like status for a failed call: the error's numeric code, else 500."""
    if isinstance(error.code, int) and not isinstance(error.code, bool) and error.code:
        return error.code
    return 500


def with_error_handling(
    manager: ErrorManager,
    reporter: Optional[Reporter] = None,
    *,
    context: Optional[str] = None,
    should_report: Optional[Callable[[NormalizedError], bool]] = None,
    transform_error: Optional[Callable[[NormalizedError], NormalizedError]] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[ApiResponse[T]]]]:
    """Decorator turning an async callable into one that returns ApiResponse.

    Args:
        manager: Error manager used to normalize failures
        reporter: Optional reporting sink
        context: Label attached to error reports
        should_report: Replaces ``manager.should_report`` when given
        transform_error: Applied to the normalized error before reporting

    Returns:
        Decorator
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[ApiResponse[T]]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> ApiResponse[T]:
            try:
                result = await func(*args, **kwargs)
                return ApiResponse(data=result, status=200)
            except Exception as e:
                processed = manager.handle(e)
                if transform_error:
                    processed = transform_error(processed)

                logger.debug(f"{func.__name__} failed: {processed.category.value} error")
                report_if_needed(
                    manager,
                    reporter,
                    processed,
                    {
                        "context": context,
                        "args": None if manager.production else {"args": args, "kwargs": kwargs},
                    },
                    should_report=should_report,
                )
                return ApiResponse(error=processed, status=status_for(processed))

        return wrapper

    return decorator
