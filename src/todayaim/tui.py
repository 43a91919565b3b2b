import logging
from datetime import date

from textual.app import App, ComposeResult
from textual.containers import Grid, Vertical, Horizontal, Container, VerticalScroll
from textual.widgets import Header, Footer, Button, Label, ListView, ListItem, Input, Select, Static
from textual.screen import ModalScreen
from textual.binding import Binding
from textual import on

from . import db, config
from .errors import FocusError
from .model import Aim, DateKey, FilterCriterion
from .scheduler import ScheduledCall
from .state import CalendarSession

logger = logging.getLogger(__name__)


class TimerScheduler:
    """Runs deferred calls on the app's own timers."""

    def __init__(self, app: App):
        self.app = app
        self._timers = []

    def call_later(self, delay: float, callback) -> ScheduledCall:
        call = ScheduledCall(delay, callback)
        timer = None

        def fire():
            if timer in self._timers:
                self._timers.remove(timer)
            call.run()

        timer = self.app.set_timer(delay, fire)
        self._timers.append(timer)
        return call

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def cancel_all(self):
        for timer in self._timers:
            timer.stop()
        self._timers = []


# --- MODAL SCREENS ---


class InputScreen(ModalScreen):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, prompt: str, initial_value: str = ""):
        super().__init__()
        self.prompt = prompt
        self.initial_value = initial_value

    def compose(self) -> ComposeResult:
        yield Container(
            Label(self.prompt),
            Input(self.initial_value, id="input-box"),
            Horizontal(Button("Cancel", id="btn-cancel"), Button(
                "OK", variant="primary", id="btn-ok"), classes="dialog-buttons"),
            id="input-dialog"
        )

    def on_mount(self): self.query_one(Input).focus()

    def action_save(self): self.dismiss(self.query_one(Input).value)
    def action_cancel(self): self.dismiss(None)

    @on(Button.Pressed, "#btn-ok")
    def on_ok(self): self.action_save()
    @on(Button.Pressed, "#btn-cancel")
    def on_cancel_btn(self): self.action_cancel()
    @on(Input.Submitted)
    def on_submit(self): self.action_save()


class HelpScreen(ModalScreen):
    BINDINGS = [Binding("escape,q,?", "close_help", "Close")]

    SECTIONS = [
        ("Calendar", [
            ("[ / ]", "Previous / next month"),
            ("t", "Back to this month"),
            ("enter / click", "Focus a day (again to close)"),
            ("escape", "Close the focused day"),
            ("F", "Cycle filter"),
            ("N", "New aim on the focused day or today"),
        ]),
        ("Focused day list", [
            ("space", "Toggle accomplished"),
            ("f", "Toggle favorite (accomplished only)"),
            ("x", "Delete aim"),
        ]),
    ]

    def compose(self) -> ComposeResult:
        rows = []
        for title, keys in self.SECTIONS:
            rows.append(Label(title, classes="help-section-title"))
            cells = []
            for key, desc in keys:
                cells.append(Label(key, classes="help-key"))
                cells.append(Label(desc, classes="help-desc"))
            rows.append(Grid(*cells, classes="help-grid"))
        yield Vertical(
            Label("TodayAim Help", id="help-title"),
            VerticalScroll(*rows, id="help-scroll"),
            Button("Close", variant="primary", id="close-help"),
            id="help-dialog"
        )

    def action_close_help(self): self.dismiss()
    def on_button_pressed(self, event): self.dismiss()


# --- WIDGETS ---


class AimItem(ListItem):
    def __init__(self, aim: Aim):
        self.aim = aim
        super().__init__()
        self.add_class(f"status-{aim.status()}")
        if aim.is_favorited:
            self.add_class("favorited")

    def compose(self) -> ComposeResult:
        star = "★ " if self.aim.is_favorited else ""
        mark = "[x]" if self.aim.is_accomplished else "[ ]"
        yield Label(f"{mark} {star}{self.aim.description}")


class ActionListView(ListView):
    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("x", "delete_aim", "Delete"),
        Binding("f", "favorite_aim", "Favorite"),
        Binding("space", "toggle_done", "Done"),
        Binding("escape", "dismiss_focus", "Close"),
    ]

    def _highlighted_aim(self):
        item = self.highlighted_child
        return item.aim if isinstance(item, AimItem) else None

    def action_delete_aim(self):
        aim = self._highlighted_aim()
        if aim:
            self.app.action_delete_aim(aim)

    def action_favorite_aim(self):
        aim = self._highlighted_aim()
        if aim:
            self.app.action_favorite_aim(aim)

    def action_toggle_done(self):
        aim = self._highlighted_aim()
        if aim:
            self.app.action_toggle_done(aim)

    def action_dismiss_focus(self): self.app.action_dismiss_focus()


class CalendarDay(Vertical):
    """
    One grid cell. Shows aim labels, or thin markers while a day is focused.
    """
    can_focus = True

    BINDINGS = [Binding("enter", "select_day", "Select", show=False)]

    def __init__(self, key: DateKey, aims, in_month: bool, is_today: bool,
                 is_focused: bool, compact: bool):
        super().__init__()
        self.key = key
        self.aims = aims
        self.is_today = is_today
        self.compact = compact
        if not in_month:
            self.add_class("other-month")
        if is_focused:
            self.add_class("focused-day")

    def compose(self) -> ComposeResult:
        yield Label(str(self.key.day), classes="day-num today" if self.is_today else "day-num")
        for aim in self.aims:
            status = f"status-{aim.status()}"
            if self.compact:
                yield Static("", classes=f"aim-marker {status}")
            else:
                yield Label(aim.description, classes=f"aim-label {status}")

    def action_select_day(self):
        self.app.select_day(self.key)

    def on_click(self):
        self.app.select_day(self.key)


class TodayAimApp(App):
    CSS = """
    Screen { align: center middle; }
    #main-container { width: 100%; height: 1fr; layout: vertical; }
    #status-bar { width: 100%; height: 1; background: $accent; color: $text; padding-left: 1; text-style: bold; }
    #cal-header { height: 3; width: 100%; align: center middle; }
    .month-label { width: 1fr; text-align: center; text-style: bold; padding-top: 1; }
    .nav-btn { width: 5; }
    #filter-select { width: 22; }
    #calendar-grid { layout: grid; grid-size: 7; width: 100%; height: 1fr; }
    .day-header { width: 100%; height: 1; text-align: center; text-style: bold; color: $accent; }
    CalendarDay { width: 100%; height: 100%; background: $surface; padding: 0 1; border: blank; }
    CalendarDay:hover { background: $surface-lighten-2; }
    CalendarDay:focus { background: $surface-lighten-1; }
    .other-month { opacity: 40%; }
    .focused-day { border: round #a05ce6; }
    .day-num { text-style: bold; }
    .today { background: #a05ce6; color: white; }

    .aim-label { width: 100%; height: 1; color: white; text-style: bold; }
    .aim-marker { width: 100%; height: 1; }
    .status-accomplished { background: #2e8b57; }
    .status-missed { background: #b03a48; }
    .status-pending { background: #c08a1e; }

    #details-panel { width: 100%; height: 12; border-top: solid $accent; }
    #details-panel AimItem { margin: 0 0 1 0; }
    #details-panel .favorited { border-left: thick yellow; }

    #input-dialog { width: 60; height: auto; border: thick $background 80%; background: $surface; padding: 1; }
    .dialog-buttons { height: auto; align: right middle; margin-top: 1; }

    #help-dialog { width: 60; height: 80%; background: $surface; border: thick $background 80%; }
    #help-title { width: 100%; height: 3; content-align: center middle; text-style: bold; border-bottom: solid $primary; }
    #help-scroll { width: 100%; height: 1fr; padding: 0 2; }
    .help-section-title { width: 100%; text-align: center; text-style: bold; color: $accent; margin-top: 1; }
    .help-grid { width: 100%; height: auto; grid-size: 2; grid-gutter: 0 1; }
    .help-key { text-align: right; color: $secondary; text-style: bold; }
    #close-help { width: 100%; margin-top: 1; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("?", "show_help", "Help"),
        Binding("[", "prev_month", "-Month"),
        Binding("]", "next_month", "+Month"),
        Binding("t", "jump_today", "Today"),
        Binding("F", "cycle_filter", "Filter"),
        Binding("N", "new_aim", "New Aim"),
        Binding("escape", "dismiss_focus", "Close", show=False),
    ]

    def __init__(self, store=db, today: date = None):
        super().__init__()
        self.first_weekday = config.get_first_weekday()
        self.scheduler = TimerScheduler(self)
        self.session = CalendarSession(
            store, self.scheduler, today=today,
            criterion=config.get_default_filter(),
            delete_delay=config.get_delete_delay())
        self.session.subscribe(lambda _: self.request_render())

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Horizontal(
                Button("<", id="btn-prev-month", classes="nav-btn"),
                Label("", id="month-label", classes="month-label"),
                Select([(c.display_string, c) for c in FilterCriterion],
                       value=self.session.criterion, allow_blank=False, id="filter-select"),
                Button(">", id="btn-next-month", classes="nav-btn"),
                id="cal-header"
            ),
            Grid(id="calendar-grid"),
            ActionListView(id="details-panel"),
            Label("Ready.", id="status-bar"),
            id="main-container"
        )
        yield Footer()

    async def on_mount(self):
        await self.refresh_calendar()

    def on_unmount(self):
        self.session.close()

    def update_status(self, msg):
        self.query_one("#status-bar", Label).update(msg)

    def request_render(self):
        self.run_worker(self.refresh_calendar(), group="render", exclusive=True)

    # --- RENDERING ---

    async def refresh_calendar(self):
        session = self.session
        focus = session.focus
        cursor = session.cursor
        index = session.day_index

        self.query_one("#month-label", Label).update(cursor.short_label)
        select = self.query_one("#filter-select", Select)
        select.display = not focus.is_focused
        if select.value != session.criterion:
            select.value = session.criterion

        grid = self.query_one("#calendar-grid", Grid)
        await grid.remove_children()
        weeks = cursor.weeks(self.first_weekday)
        headers = [Label(date(2024, 1, 1 + (self.first_weekday + i) % 7).strftime("%a"),
                         classes="day-header") for i in range(7)]
        cells = [
            CalendarDay(key, index.get(key, []), key.in_month(cursor),
                        key.is_today(session.today), key == focus.date,
                        compact=focus.is_focused)
            for week in weeks for key in week
        ]
        grid.styles.grid_size_rows = len(weeks) + 1
        await grid.mount_all(headers + cells)
        await self.show_details()

    async def show_details(self):
        focus = self.session.focus
        panel = self.query_one("#details-panel", ActionListView)
        await panel.clear()
        panel.display = focus.is_focused
        if not focus.is_focused:
            self.update_status(f"Ready. Filter: {self.session.criterion.display_string}")
            return
        if focus.records:
            await panel.extend([AimItem(aim) for aim in focus.records])
            panel.focus()
        count = len(focus.records)
        self.update_status(f"{focus.date.isoformat()}: {count} aim{'s' if count != 1 else ''}")

    # --- ACTIONS ---

    def select_day(self, key: DateKey):
        self.session.select_day(key)

    def action_dismiss_focus(self):
        self.session.dismiss_focus()

    def action_prev_month(self): self.session.advance_month(-1)
    def action_next_month(self): self.session.advance_month(1)
    def action_jump_today(self): self.session.jump_to_today()

    def action_cycle_filter(self):
        if self.session.focus.is_focused:
            self.notify("Close the focused day to change the filter", severity="warning")
            return
        self.session.set_filter_criterion(self.session.criterion.next())
        self.notify(f"Filter: {self.session.criterion.display_string}")

    def action_new_aim(self):
        focus = self.session.focus
        target = focus.date.to_date() if focus.is_focused else self.session.today

        def callback(description):
            if description and description.strip():
                offset = (target - self.session.today).days
                self.session.add_aim(description.strip(), offset)
                self.notify(f"Aim added for {target.isoformat()}")
        self.push_screen(InputScreen(f"New aim for {target.isoformat()}:"), callback)

    def action_delete_aim(self, aim: Aim):
        try:
            self.session.request_delete(aim)
        except FocusError as e:
            logger.debug("Delete rejected: %s", e)
            self.notify(str(e), severity="warning")
            return
        self.notify("Aim deleted")

    def action_favorite_aim(self, aim: Aim):
        try:
            self.session.toggle_favorite(aim)
        except FocusError as e:
            self.notify(str(e), severity="warning")

    def action_toggle_done(self, aim: Aim):
        self.session.toggle_accomplished(aim)

    def action_show_help(self): self.push_screen(HelpScreen())

    @on(Button.Pressed, "#btn-prev-month")
    def on_prev_month_click(self): self.action_prev_month()
    @on(Button.Pressed, "#btn-next-month")
    def on_next_month_click(self): self.action_next_month()

    @on(Select.Changed, "#filter-select")
    def on_filter_changed(self, event: Select.Changed):
        if not isinstance(event.value, FilterCriterion) or event.value == self.session.criterion:
            return
        self.session.set_filter_criterion(event.value)


def run_tui():
    config.setup_logging()
    app = TodayAimApp()
    app.run()
