"""
Lifecycle hooks for mappers.
"""

from .dispatcher import EVENTS, HookDispatcher, HookHandler

__all__ = ["EVENTS", "HookDispatcher", "HookHandler"]
