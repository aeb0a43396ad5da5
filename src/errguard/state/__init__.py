"""Shared error state for errguard."""

from errguard.state.register import DEFAULT_HISTORY_CAPACITY, ErrorRegister

__all__ = ["ErrorRegister", "DEFAULT_HISTORY_CAPACITY"]
