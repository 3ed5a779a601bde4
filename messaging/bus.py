from __future__ import annotations
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

log = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]


class EventBus:
    """
    In-process stand-in for the broker. Delivery is synchronous: a handler
    error propagates to the publisher so the outbox keeps the message pending.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe_all(self) -> None:
        self._handlers.clear()

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        handlers = self._handlers.get(event_type, [])
        if not handlers:
            log.debug("No subscribers for %s", event_type)
        for handler in handlers:
            handler(payload)


bus = EventBus()
