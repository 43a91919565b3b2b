"""Textual app driven headless through run_test."""

import asyncio

import pytest
from textual.widgets import Label, Select

from todayaim.model import DateKey
from todayaim.tui import AimItem, CalendarDay, TodayAimApp

D = DateKey(2026, 10, 17)


@pytest.fixture(autouse=True)
def isolated(temp_config):
    yield


async def settle(app, pilot):
    await pilot.pause()
    await app.workers.wait_for_complete()
    await pilot.pause()


def test_month_grid_and_focus(store, today):
    async def scenario():
        app = TodayAimApp(store=store, today=today)
        async with app.run_test(size=(120, 50)) as pilot:
            await settle(app, pilot)
            assert "Oct 2026" in str(app.query_one("#month-label", Label).render())
            cells = {cell.key: cell for cell in app.query(CalendarDay)}
            assert len(cells[D].aims) == 2

            app.select_day(D)
            await settle(app, pilot)
            assert [item.aim.id for item in app.query(AimItem)] == [1, 2]
            assert not app.query_one("#filter-select", Select).display

            app.action_dismiss_focus()
            await settle(app, pilot)
            assert not app.session.focus.is_focused
            assert list(app.query(AimItem)) == []

    asyncio.run(scenario())


def test_delete_hides_focus_then_reaches_store(store, today):
    async def scenario():
        app = TodayAimApp(store=store, today=today)
        async with app.run_test(size=(120, 50)) as pilot:
            await settle(app, pilot)
            app.select_day(D)
            await settle(app, pilot)

            app.action_delete_aim(app.session.focus.records[0])
            assert not app.session.focus.is_focused
            assert ("delete_aim", 1) not in store.calls

            await pilot.pause(app.session.delete_delay + 0.3)
            await settle(app, pilot)
            assert ("delete_aim", 1) in store.calls
            assert app.scheduler.active_timers == 0

    asyncio.run(scenario())


def test_month_buttons(store, today):
    async def scenario():
        app = TodayAimApp(store=store, today=today)
        async with app.run_test(size=(120, 50)) as pilot:
            await settle(app, pilot)
            app.action_next_month()
            await settle(app, pilot)
            assert "Nov 2026" in str(app.query_one("#month-label", Label).render())
            app.action_prev_month()
            await settle(app, pilot)
            assert "Oct 2026" in str(app.query_one("#month-label", Label).render())

    asyncio.run(scenario())
