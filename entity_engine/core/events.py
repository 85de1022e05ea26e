"""In-process event registry used to announce metadata changes"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from entity_engine.core.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_UPDATED = "config.updated"


class EntityEvent(BaseModel):
    model_config = {"protected_namespaces": ()}

    name: str
    model_name: Optional[str] = None
    object_id: Optional[str] = None
    parameter: Any = None


Listener = Callable[[EntityEvent], None]


class EventRegistry:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def register_listener(self, event_name: str, listener: Listener) -> None:
        self._listeners.setdefault(event_name, []).append(listener)

    def unregister_listener(self, event_name: str, listener: Listener) -> bool:
        listeners = self._listeners.get(event_name)
        if not listeners or listener not in listeners:
            return False
        listeners.remove(listener)
        if not listeners:
            del self._listeners[event_name]
        return True

    def get_listeners(self, event_name: str) -> List[Listener]:
        return list(self._listeners.get(event_name, []))

    def emit(self, event: EntityEvent) -> None:
        """Invoke every listener of ``event.name`` in registration order.

        A failing listener is logged and does not prevent the remaining
        listeners from running.
        """
        listeners = self.get_listeners(event.name)
        logger.debug(f"Emitting event {event.name} to {len(listeners)} listeners")
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener for event {event.name} failed")
