"""Explicit construction of the shared error-handling collaborators.

Build one ``Runtime`` at process start and pass it (or its parts) to the
code that needs it.
"""

from dataclasses import dataclass
from typing import Optional

from errguard.config.settings import Settings, get_settings
from errguard.errors.manager import ErrorManager
from errguard.errors.reporting import LoggingReporter
from errguard.features.flags import FeaturePolicy, default_flags
from errguard.state.register import ErrorRegister


@dataclass
class Runtime:
    """Settings plus the manager, register, reporter and feature policy built from them."""

    settings: Settings
    policy: FeaturePolicy
    manager: ErrorManager
    register: ErrorRegister
    reporter: LoggingReporter


def build_runtime(settings: Optional[Settings] = None) -> Runtime:
    """Create a Runtime from settings (defaults to the cached settings)."""
    settings = settings or get_settings()
    production = settings.is_production

    policy = FeaturePolicy(default_flags(production=production), overrides=settings.features)
    return Runtime(
        settings=settings,
        policy=policy,
        manager=ErrorManager(policy, production=production),
        register=ErrorRegister(capacity=settings.history.capacity),
        reporter=LoggingReporter(environment=settings.environment),
    )
