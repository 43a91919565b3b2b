"""
Calendar session: the one owned state container for the calendar view.

CalendarState holds the navigation cursor, the active filter and the
focus. Every user action is a command object passed to
CalendarSession.dispatch, which applies the pure transitions and forwards
flag changes and deletes to the store. The store is never read through a
cached record: after each write the session reloads and rebuilds the
day index from live data.

Store contract (duck-typed, see todayaim.db):
    get_all_aims() -> list of Aim
    add_aim(description, offset_from_today)
    delete_aim(aim_id)
    set_favorite(aim_id, value)
    set_accomplished(aim_id, value)
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, List, Optional

from . import focus as focus_rules
from .dayindex import DayIndex, build_day_index
from .focus import FocusState, UNFOCUSED
from .model import Aim, DateKey, FilterCriterion
from .navigation import YearMonth
from .scheduler import ImmediateScheduler, ScheduledCall

logger = logging.getLogger(__name__)

DEFAULT_DELETE_DELAY = 0.4


@dataclass(frozen=True)
class CalendarState:
    cursor: YearMonth
    criterion: FilterCriterion = FilterCriterion.ALL
    focus: FocusState = field(default=UNFOCUSED)


# --- COMMANDS ---

@dataclass(frozen=True)
class SelectDay:
    key: DateKey


@dataclass(frozen=True)
class DismissFocus:
    pass


@dataclass(frozen=True)
class SetFilterCriterion:
    criterion: FilterCriterion


@dataclass(frozen=True)
class AdvanceMonth:
    direction: int


@dataclass(frozen=True)
class JumpToToday:
    pass


@dataclass(frozen=True)
class RequestDelete:
    aim: Aim


@dataclass(frozen=True)
class CommitDelete:
    aim_id: int


@dataclass(frozen=True)
class ToggleFavorite:
    aim: Aim


@dataclass(frozen=True)
class ToggleAccomplished:
    aim: Aim


@dataclass(frozen=True)
class AddAim:
    description: str
    offset_from_today: int = 0


# --- SESSION ---


class CalendarSession:
    def __init__(self, store, scheduler=None, today: Optional[date] = None,
                 criterion: FilterCriterion = FilterCriterion.ALL,
                 delete_delay: float = DEFAULT_DELETE_DELAY):
        self.store = store
        self.scheduler = scheduler or ImmediateScheduler()
        self.delete_delay = delete_delay
        self._today = today
        self.state = CalendarState(YearMonth.current(self.today),
                                   FilterCriterion(criterion))
        self.aims: List[Aim] = []
        self._version = 0
        self._index_cache = None
        self._pending: List[ScheduledCall] = []
        self._listeners: List[Callable[["CalendarSession"], None]] = []
        self.reload()

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def focus(self) -> FocusState:
        return self.state.focus

    @property
    def cursor(self) -> YearMonth:
        return self.state.cursor

    @property
    def criterion(self) -> FilterCriterion:
        return self.state.criterion

    @property
    def day_index(self) -> DayIndex:
        cache_key = (self._version, self.state.criterion, self.today)
        if self._index_cache is None or self._index_cache[0] != cache_key:
            index = build_day_index(self.aims, self.today, self.state.criterion)
            self._index_cache = (cache_key, index)
        return self._index_cache[1]

    def subscribe(self, listener: Callable[["CalendarSession"], None]):
        self._listeners.append(listener)

    def _changed(self):
        for listener in list(self._listeners):
            listener(self)

    def reload(self):
        self.aims = list(self.store.get_all_aims())
        self._version += 1
        self.state = replace(self.state, focus=focus_rules.refresh(
            self.state.focus, self.day_index))
        self._changed()

    # --- DISPATCH ---

    def dispatch(self, command):
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command: {command!r}")
        logger.debug("dispatch %r", command)
        handler(self, command)

    def _on_select_day(self, cmd: SelectDay):
        self._set_focus(focus_rules.select_day(
            self.state.focus, cmd.key, self.day_index))

    def _on_dismiss(self, cmd: DismissFocus):
        self._set_focus(focus_rules.dismiss(self.state.focus))

    def _on_set_filter(self, cmd: SetFilterCriterion):
        criterion = FilterCriterion(cmd.criterion)
        self.state = replace(self.state, criterion=criterion)
        self._set_focus(focus_rules.refresh(self.state.focus, self.day_index))

    def _on_advance_month(self, cmd: AdvanceMonth):
        self.state = replace(self.state, cursor=self.state.cursor.advance(cmd.direction))
        self._changed()

    def _on_jump_today(self, cmd: JumpToToday):
        self.state = replace(self.state, cursor=YearMonth.current(self.today))
        self._changed()

    def _on_request_delete(self, cmd: RequestDelete):
        self._set_focus(focus_rules.request_delete(self.state.focus, cmd.aim))
        aim_id = cmd.aim.id
        call = self.scheduler.call_later(
            self.delete_delay, lambda: self.dispatch(CommitDelete(aim_id)))
        if not call.done:
            self._pending.append(call)

    def _on_commit_delete(self, cmd: CommitDelete):
        self._pending = [c for c in self._pending if not (c.done or c.cancelled)]
        logger.info("Deleting aim %s", cmd.aim_id)
        self.store.delete_aim(cmd.aim_id)
        self.reload()

    def _live(self, aim: Aim) -> Optional[Aim]:
        """The current copy of an aim; callers may hold an older one."""
        for live in self.aims:
            if live.id == aim.id:
                return live
        logger.info("Aim %s is gone; ignoring", aim.id)
        return None

    def _on_toggle_favorite(self, cmd: ToggleFavorite):
        aim = self._live(cmd.aim)
        if aim is None:
            return
        focus_rules.check_toggle_favorite(self.state.focus, aim)
        self.store.set_favorite(aim.id, not aim.is_favorited)
        self.reload()

    def _on_toggle_accomplished(self, cmd: ToggleAccomplished):
        aim = self._live(cmd.aim)
        if aim is None:
            return
        self.store.set_accomplished(aim.id, not aim.is_accomplished)
        self.reload()

    def _on_add_aim(self, cmd: AddAim):
        self.store.add_aim(cmd.description, cmd.offset_from_today)
        self.reload()

    def _set_focus(self, new_focus: FocusState):
        self.state = replace(self.state, focus=new_focus)
        self._changed()

    _handlers = {
        SelectDay: _on_select_day,
        DismissFocus: _on_dismiss,
        SetFilterCriterion: _on_set_filter,
        AdvanceMonth: _on_advance_month,
        JumpToToday: _on_jump_today,
        RequestDelete: _on_request_delete,
        CommitDelete: _on_commit_delete,
        ToggleFavorite: _on_toggle_favorite,
        ToggleAccomplished: _on_toggle_accomplished,
        AddAim: _on_add_aim,
    }

    # --- CONVENIENCE ---

    def select_day(self, key: DateKey): self.dispatch(SelectDay(key))
    def dismiss_focus(self): self.dispatch(DismissFocus())
    def set_filter_criterion(self, criterion): self.dispatch(
        SetFilterCriterion(FilterCriterion(criterion)))
    def advance_month(self, direction: int): self.dispatch(AdvanceMonth(direction))
    def jump_to_today(self): self.dispatch(JumpToToday())
    def request_delete(self, aim: Aim): self.dispatch(RequestDelete(aim))
    def toggle_favorite(self, aim: Aim): self.dispatch(ToggleFavorite(aim))
    def toggle_accomplished(self, aim: Aim): self.dispatch(ToggleAccomplished(aim))
    def add_aim(self, description: str, offset_from_today: int = 0): self.dispatch(
        AddAim(description, offset_from_today))

    @property
    def pending_deletes(self) -> int:
        return len([c for c in self._pending if not (c.done or c.cancelled)])

    def close(self):
        """Drop deletes that have not run yet."""
        for call in self._pending:
            call.cancel()
        self._pending = []
        self.scheduler.cancel_all()
