class TodayAimError(Exception):
    """Base class for errors raised by the calendar engine."""


class FocusError(TodayAimError):
    """A command was issued that the current focus state does not allow."""
