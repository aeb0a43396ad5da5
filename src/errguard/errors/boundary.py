"""Error-aware boundary around a guarded region.

The boundary is a two-state machine:

- STABLE: ``render`` calls the guarded region and returns its output
- FAILED: the region raised; ``render`` returns fallback output built from
  the held NormalizedError and does not call the region again

``reset()`` or a change in the watched reset keys moves FAILED back to
STABLE. Failures raised outside ``render`` (for example in callbacks the
region schedules) are not caught here and must go through the error manager
explicitly.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

from errguard.errors.manager import ErrorManager
from errguard.errors.reporting import Reporter, report_if_needed
from errguard.errors.taxonomy import NormalizedError
from errguard.features.flags import ENABLE_ERROR_BOUNDARIES

logger = logging.getLogger(__name__)


class BoundaryState(str, Enum):
    """States of an error boundary."""

    STABLE = "stable"
    FAILED = "failed"


@dataclass
class FallbackView:
    """Default fallback output when no fallback was supplied."""

    error: NormalizedError
    reset: Callable[[], None]
    title: str = "Something went wrong"
    action_label: str = "Try again"

    @property
    def message(self) -> str:
        return self.error.message or "An unexpected error occurred."


def reset_keys_changed(previous: Sequence[Any], current: Sequence[Any]) -> bool:
    """True if the key lists differ in length or in any position."""
    return len(previous) != len(current) or any(
        prev is not cur and prev != cur for prev, cur in zip(previous, current)
    )


class ErrorBoundary:
    """Catches failures from a guarded region and holds them as fallback state."""

    def __init__(
        self,
        region: Callable[..., Any],
        manager: ErrorManager,
        *,
        fallback: Any = None,
        reporter: Optional[Reporter] = None,
        on_error: Optional[Callable[[NormalizedError], None]] = None,
        reset_keys: Optional[Sequence[Any]] = None,
        name: Optional[str] = None,
    ):
        self.region = region
        self.manager = manager
        self.fallback = fallback
        self.reporter = reporter
        self.on_error = on_error
        self.name = name or getattr(region, "__name__", "region")
        self._reset_keys = list(reset_keys) if reset_keys is not None else None
        self._state = BoundaryState.STABLE
        self._error: Optional[NormalizedError] = None

    @property
    def state(self) -> BoundaryState:
        return self._state

    @property
    def error(self) -> Optional[NormalizedError]:
        return self._error

    @property
    def has_error(self) -> bool:
        return self._state == BoundaryState.FAILED

    @property
    def enabled(self) -> bool:
        return self.manager.policy.enabled(ENABLE_ERROR_BOUNDARIES)

    def render(self, *args: Any, **kwargs: Any) -> Any:
        """Evaluate the guarded region, or the fallback while failed."""
        if not self.enabled:
            return self.region(*args, **kwargs)
        if self._state == BoundaryState.FAILED:
            return self._render_fallback()
        try:
            return self.region(*args, **kwargs)
        except Exception as e:
            self._fail(e)
            return self._render_fallback()

    async def render_async(self, *args: Any, **kwargs: Any) -> Any:
        """Async variant of ``render`` for coroutine regions."""
        region: Callable[..., Awaitable[Any]] = self.region
        if not self.enabled:
            return await region(*args, **kwargs)
        if self._state == BoundaryState.FAILED:
            return self._render_fallback()
        try:
            return await region(*args, **kwargs)
        except Exception as e:
            self._fail(e)
            return self._render_fallback()

    def reset(self) -> None:
        """Clear the held error and return to the guarded region's output."""
        if self._state == BoundaryState.FAILED:
            logger.debug(f"Boundary {self.name} reset")
        self._state = BoundaryState.STABLE
        self._error = None

    def update_reset_keys(self, keys: Optional[Sequence[Any]]) -> bool:
        """Replace the watched keys, resetting if they changed while failed.

        Returns True if the boundary was reset.
        """
        previous = self._reset_keys
        self._reset_keys = list(keys) if keys is not None else None

        if (
            previous is not None
            and self._reset_keys is not None
            and self._state == BoundaryState.FAILED
            and reset_keys_changed(previous, self._reset_keys)
        ):
            self.reset()
            return True
        return False

    def _fail(self, raw: BaseException) -> None:
        processed = self.manager.handle(raw)
        self._state = BoundaryState.FAILED
        self._error = processed

        if not self.manager.production:
            logger.error(f"Error caught by boundary {self.name}: {raw!r}")

        report_if_needed(self.manager, self.reporter, processed, {"boundary": self.name})

        if self.on_error:
            self.on_error(processed)

    def _render_fallback(self) -> Any:
        error = self._error
        if callable(self.fallback):
            return self.fallback(error)
        if self.fallback is not None:
            return self.fallback
        return FallbackView(error=error, reset=self.reset)
