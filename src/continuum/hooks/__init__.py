"""Lifecycle hooks invoked by the host runtime."""

from continuum.hooks.events import HookEvent, HookResult
from continuum.hooks.runner import run_hook

__all__ = ["HookEvent", "HookResult", "run_hook"]
