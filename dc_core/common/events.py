# dc_core/common/events.py
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]
Disposer = Callable[[], None]


class EventBus:
    """
    In-process publish/subscribe.

    Usage:
        bus = EventBus()
        dispose = bus.subscribe("appointment.scheduled", handler)
        bus.publish("appointment.scheduled", {"appointment_id": "..."})
        dispose()

    Keep payloads ID-based and JSON-friendly to avoid cross-app imports.
    A failing handler is logged and skipped; it never fails the publisher.
    """

    def __init__(self) -> None:
        self._registry: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: Handler) -> Disposer:
        self._registry[event_name].append(handler)

        def _dispose() -> None:
            self.unsubscribe(event_name, handler)

        return _dispose

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        handlers = self._registry.get(event_name)
        if not handlers:
            return
        self._registry[event_name] = [h for h in handlers if h is not handler]

    def handlers(self, event_name: str) -> List[Handler]:
        return list(self._registry.get(event_name, []))

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        for handler in self.handlers(event_name):
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event_name)


def get_event_bus() -> EventBus:
    """
    The bus owned by the running application (see CommonConfig).
    """
    from django.apps import apps

    return apps.get_app_config("common").event_bus
