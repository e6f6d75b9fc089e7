"""
Main-Thread Dispatch
====================

Coordinator callbacks run on background worker threads, but Tk (and
CustomTkinter) widgets may only be touched from the thread running the main
loop. ``MainThreadDispatcher`` re-posts each event with ``widget.after(0, ...)``
so the handler runs inside the event loop, the same way the application's
screens hand results back from their background threads.

Usage:
------
    >>> dispatcher = MainThreadDispatcher(root_window, self.on_sync_event)
    >>> unsubscribe = api.coordinator.subscribe(dispatcher)
"""

import logging
from typing import Any, Callable

from blogadmin.core.coordinator import SyncEvent

logger = logging.getLogger(__name__)


class MainThreadDispatcher:
    """
    Callable subscriber that forwards events onto a widget's event loop.

    Args:
        widget: Any object with a Tk-style ``after(ms, callback)`` method
        handler: Function run on the UI thread for each event
    """

    def __init__(self, widget: Any, handler: Callable[[SyncEvent], None]):
        self.widget = widget
        self.handler = handler
        self.closed = False

    def __call__(self, event: SyncEvent):
        if self.closed:
            return
        try:
            self.widget.after(0, lambda: self._deliver(event))
        except RuntimeError as e:
            # Tk raises RuntimeError once the main loop has exited
            logger.debug(f"Dropping {event.reason.value} event, UI is gone: {e}")
            self.closed = True

    def _deliver(self, event: SyncEvent):
        if not self.closed:
            self.handler(event)

    def close(self):
        """Stop forwarding; events already posted are dropped on delivery."""
        self.closed = True
