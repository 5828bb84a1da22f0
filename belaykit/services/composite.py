from __future__ import annotations

from typing import Optional

from belaykit.models import Event, EventHandler


def compose_handlers(*handlers: Optional[EventHandler]) -> EventHandler:
    """Fan one event out to several handlers, in the order given. `None` entries are skipped."""
    active = [handler for handler in handlers if handler is not None]

    def handle(event: Event) -> None:
        for handler in active:
            handler(event)

    return handle
