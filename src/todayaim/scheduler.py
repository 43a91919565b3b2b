"""Deferred calls used to commit deletes after the UI has moved on."""
from typing import Callable


class ScheduledCall:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self):
        self.cancelled = True

    def run(self):
        if self.cancelled or self.done:
            return
        self.done = True
        self.callback()


class ImmediateScheduler:
    """Runs callbacks right away. Used by the command line."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(0.0, callback)
        call.run()
        return call

    def cancel_all(self):
        pass
