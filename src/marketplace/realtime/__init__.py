"""Dispatcher registry: one live-channel dispatcher per process."""

from marketplace.realtime.dispatcher import Dispatcher

_dispatcher_instance: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Return the process-wide dispatcher (singleton)."""
    global _dispatcher_instance
    if _dispatcher_instance is None:
        _dispatcher_instance = Dispatcher()
    return _dispatcher_instance


def set_dispatcher(dispatcher: Dispatcher) -> None:
    global _dispatcher_instance
    _dispatcher_instance = dispatcher


def reset_dispatcher() -> None:
    """Drop the dispatcher and every registration (useful for testing)."""
    global _dispatcher_instance
    _dispatcher_instance = None
