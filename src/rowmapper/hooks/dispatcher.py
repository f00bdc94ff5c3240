"""
Hook dispatcher coordinating mapper lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

HookHandler = Callable[..., None]

EVENTS = frozenset(
    {
        "modify_new_record",
        "before_insert",
        "modify_insert",
        "after_insert",
        "before_update",
        "modify_update",
        "after_update",
        "before_delete",
        "modify_delete",
        "after_delete",
    }
)


class HookDispatcher:
    """
    Maintains handlers per event. A dispatcher built with a ``parent`` fires
    the parent's handlers first, so session-wide hooks run before
    mapper-specific ones.
    """

    def __init__(self, parent: Optional["HookDispatcher"] = None) -> None:
        self.parent = parent
        self._handlers: Dict[str, List[HookHandler]] = defaultdict(list)

    def register(self, event: str, handler: HookHandler) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown hook event '{event}'")
        self._handlers[event].append(handler)

    def on(self, event: str) -> Callable[[HookHandler], HookHandler]:
        def decorator(handler: HookHandler) -> HookHandler:
            self.register(event, handler)
            return handler

        return decorator

    def handlers(self, event: str) -> List[HookHandler]:
        inherited = self.parent.handlers(event) if self.parent is not None else []
        return inherited + list(self._handlers.get(event, []))

    def fire(self, event: str, record: Any, **context: Any) -> None:
        for handler in self.handlers(event):
            handler(record, **context)

    def clear(self) -> None:
        self._handlers.clear()
