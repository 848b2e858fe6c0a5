"""Synchronous event emitter (Observer Pattern)."""
from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional


class EventEmitter:
    """
    Minimal synchronous observer registry.

    Handlers run inside emit(), in registration order. A handler may
    register or remove handlers while being notified; the change applies
    from the next emit().
    """

    def __init__(self):
        self._handlers: DefaultDict[str, List[Callable]] = defaultdict(list)

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers a handler for an event."""
        self._handlers[event].append(callback)
        return self

    def once(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers a handler that removes itself after its first call."""
        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            callback(*args, **kwargs)

        return self.on(event, wrapper)

    def emit(self, event: str, *args, **kwargs) -> int:
        """
        Calls every handler registered for an event.

        Returns:
            Number of handlers called
        """
        handlers = tuple(self._handlers.get(event, ()))
        for handler in handlers:
            handler(*args, **kwargs)
        return len(handlers)

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Removes one handler, or every handler of the event when none is given."""
        if callback is None:
            self._handlers.pop(event, None)
            return self

        handlers = self._handlers.get(event)
        if handlers and callback in handlers:
            handlers.remove(callback)
            if not handlers:
                del self._handlers[event]
        return self

    def listener_count(self, event: str) -> int:
        """Returns the number of handlers registered for an event."""
        return len(self._handlers.get(event, ()))
