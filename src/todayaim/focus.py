"""
Focus state machine for the calendar.

At most one day is focused. The focused date and its aims are set and
cleared together. All transitions are pure: they take a FocusState and
return a new one.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .dayindex import DayIndex, lookup
from .errors import FocusError
from .model import Aim, DateKey


@dataclass(frozen=True)
class FocusState:
    date: Optional[DateKey] = None
    records: Optional[Tuple[Aim, ...]] = None

    def __post_init__(self):
        if (self.date is None) != (self.records is None):
            raise ValueError("focused date and records must be set together")

    @classmethod
    def focused(cls, key: DateKey, index: DayIndex) -> "FocusState":
        return cls(key, tuple(lookup(index, key)))

    @property
    def is_focused(self) -> bool:
        return self.date is not None


UNFOCUSED = FocusState()


def select_day(focus: FocusState, key: DateKey, index: DayIndex) -> FocusState:
    if focus.date == key:
        return UNFOCUSED
    return FocusState.focused(key, index)


def dismiss(focus: FocusState) -> FocusState:
    return UNFOCUSED


def request_delete(focus: FocusState, aim: Aim) -> FocusState:
    """
    Optimistic first half of a delete: the detail strip goes away at once.
    Removing the aim from the store is scheduled separately by the caller.
    """
    if not focus.is_focused:
        raise FocusError("Nothing is focused; select a day first")
    return UNFOCUSED


def check_toggle_favorite(focus: FocusState, aim: Aim):
    if not focus.is_focused:
        raise FocusError("Nothing is focused; select a day first")
    if not aim.is_accomplished:
        raise FocusError("Only accomplished aims can be favorited")


def refresh(focus: FocusState, index: DayIndex) -> FocusState:
    """Re-read the focused day's aims from a freshly built index."""
    if not focus.is_focused:
        return focus
    return FocusState.focused(focus.date, index)
