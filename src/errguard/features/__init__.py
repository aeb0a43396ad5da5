"""Feature flags for errguard."""

from errguard.features.flags import (
    ENABLE_AUTOMATIC_RETRY,
    ENABLE_DETAILED_VALIDATION_ERRORS,
    ENABLE_ERROR_BOUNDARIES,
    ENABLE_ERROR_REPORTING,
    ENABLE_ERROR_STACK_TRACES,
    USE_NEW_ERROR_HANDLING,
    FeatureFlag,
    FeaturePolicy,
    default_flags,
)

__all__ = [
    "FeatureFlag",
    "FeaturePolicy",
    "default_flags",
    "ENABLE_ERROR_STACK_TRACES",
    "USE_NEW_ERROR_HANDLING",
    "ENABLE_ERROR_BOUNDARIES",
    "ENABLE_AUTOMATIC_RETRY",
    "ENABLE_DETAILED_VALIDATION_ERRORS",
    "ENABLE_ERROR_REPORTING",
]
