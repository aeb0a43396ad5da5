"""Feature flag policy.

Flags gate stack-trace inclusion, reporting and automatic retry. The core
treats the policy as read-only configuration; ``update_flag`` and
``register_flag`` exist for the CLI demo and for tests.
"""

import logging
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENABLE_ERROR_STACK_TRACES = "ENABLE_ERROR_STACK_TRACES"
USE_NEW_ERROR_HANDLING = "USE_NEW_ERROR_HANDLING"
ENABLE_ERROR_BOUNDARIES = "ENABLE_ERROR_BOUNDARIES"
ENABLE_AUTOMATIC_RETRY = "ENABLE_AUTOMATIC_RETRY"
ENABLE_DETAILED_VALIDATION_ERRORS = "ENABLE_DETAILED_VALIDATION_ERRORS"
ENABLE_ERROR_REPORTING = "ENABLE_ERROR_REPORTING"


class FeatureFlag(BaseModel):
    """A single named feature toggle."""

    model_config = ConfigDict(extra="ignore")

    name: str
    enabled: bool
    description: str = ""
    control_group: Optional[str] = None


def default_flags(production: bool = False) -> dict[str, FeatureFlag]:
    """Build the default flag set for the given environment."""
    flags = [
        FeatureFlag(
            name=ENABLE_ERROR_STACK_TRACES,
            enabled=not production,
            description="Show detailed stack traces in error messages",
        ),
        FeatureFlag(
            name=USE_NEW_ERROR_HANDLING,
            enabled=True,
            description="Use the new error handling system instead of legacy",
        ),
        FeatureFlag(
            name=ENABLE_ERROR_BOUNDARIES,
            enabled=True,
            description="Enable error boundaries around guarded regions",
        ),
        FeatureFlag(
            name=ENABLE_AUTOMATIC_RETRY,
            enabled=True,
            description="Automatically retry failed network requests",
            control_group="networking",
        ),
        FeatureFlag(
            name=ENABLE_DETAILED_VALIDATION_ERRORS,
            enabled=True,
            description="Show detailed validation errors instead of generic messages",
            control_group="forms",
        ),
        FeatureFlag(
            name=ENABLE_ERROR_REPORTING,
            enabled=True,
            description="Report errors to monitoring service",
            control_group="monitoring",
        ),
    ]
    return {flag.name: flag for flag in flags}


class FeaturePolicy:
    """Registry of feature flags answering ``enabled(name)``."""

    def __init__(
        self,
        flags: Optional[dict[str, FeatureFlag]] = None,
        overrides: Optional[dict[str, bool]] = None,
    ):
        self._flags: dict[str, FeatureFlag] = dict(flags) if flags is not None else default_flags()
        for name, enabled in (overrides or {}).items():
            if name in self._flags:
                self.update_flag(name, enabled)
            else:
                self.register_flag(FeatureFlag(name=name, enabled=enabled))

    def enabled(self, name: str) -> bool:
        """Check if a feature flag is enabled. Unknown flags are disabled."""
        flag = self._flags.get(name)
        return flag is not None and flag.enabled is True

    def get_flag(self, name: str) -> Optional[FeatureFlag]:
        return self._flags.get(name)

    def all_flags(self) -> dict[str, FeatureFlag]:
        """Copy of every registered flag."""
        return {name: flag.model_copy() for name, flag in self._flags.items()}

    def update_flag(self, name: str, enabled: bool) -> None:
        """Toggle an existing flag. Unknown names are ignored."""
        flag = self._flags.get(name)
        if flag is None:
            logger.debug(f"Ignoring update for unknown flag {name}")
            return
        self._flags[name] = flag.model_copy(update={"enabled": enabled})

    def register_flag(self, flag: FeatureFlag) -> None:
        self._flags[flag.name] = flag

    def with_feature_flag(
        self,
        name: str,
        enabled_fn: Callable[[], T],
        disabled_fn: Optional[Callable[[], T]] = None,
    ) -> Optional[T]:
        """Run ``enabled_fn`` when the flag is on, else ``disabled_fn`` if given."""
        if self.enabled(name):
            return enabled_fn()
        return disabled_fn() if disabled_fn else None
