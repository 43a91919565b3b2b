"""Shared fixtures: fake store, manual scheduler, temporary database and config."""

from datetime import date

import pytest

from todayaim import config, db
from todayaim.model import Aim
from todayaim.scheduler import ScheduledCall

TODAY = date(2026, 10, 17)


class FakeStore:
    """In-memory store honouring the same contract as todayaim.db."""

    def __init__(self, aims=None):
        self.aims = list(aims or [])
        self.calls = []
        self.fail_deletes = False
        self._next_id = max((a.id for a in self.aims), default=0) + 1

    def get_all_aims(self):
        return list(self.aims)

    def add_aim(self, description, offset_from_today=0):
        self.calls.append(("add_aim", description, offset_from_today))
        self.aims.append(Aim(self._next_id, offset_from_today, description=description))
        self._next_id += 1

    def delete_aim(self, aim_id):
        self.calls.append(("delete_aim", aim_id))
        if self.fail_deletes:
            return
        self.aims = [a for a in self.aims if a.id != aim_id]

    def _update(self, aim_id, **changes):
        self.aims = [Aim(a.id, a.offset_from_today,
                         changes.get("is_accomplished", a.is_accomplished),
                         changes.get("is_favorited", a.is_favorited),
                         a.description) if a.id == aim_id else a
                     for a in self.aims]

    def set_favorite(self, aim_id, value):
        self.calls.append(("set_favorite", aim_id, value))
        self._update(aim_id, is_favorited=value)

    def set_accomplished(self, aim_id, value):
        self.calls.append(("set_accomplished", aim_id, value))
        self._update(aim_id, is_accomplished=value)


class ManualScheduler:
    """Queues callbacks on a virtual clock that only moves when told to."""

    def __init__(self):
        self.now = 0.0
        self._calls = []

    def call_later(self, delay, callback):
        call = ScheduledCall(self.now + delay, callback)
        self._calls.append(call)
        return call

    @property
    def pending(self):
        return [c for c in self._calls if not (c.cancelled or c.done)]

    def advance(self, seconds):
        self.now += seconds
        for call in sorted((c for c in self.pending if c.due <= self.now),
                           key=lambda c: c.due):
            call.run()
        self._calls = self.pending

    def run_pending(self):
        if self._calls:
            self.advance(max(c.due for c in self._calls) - self.now)

    def cancel_all(self):
        for call in self._calls:
            call.cancel()
        self._calls = []


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def example_aims():
    return [
        Aim(1, 0, False, False, "Read a chapter"),
        Aim(2, 0, True, True, "Run 5k"),
        Aim(3, 1, False, False, "Call home"),
    ]


@pytest.fixture
def store(example_aims):
    return FakeStore(example_aims)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    path = tmp_path / "data" / "todayaim.db"
    monkeypatch.setattr(db, "DB_PATH", str(path))
    return path


@pytest.fixture
def temp_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(config, "CONFIG_PATH", str(config_dir / "config.toml"))
    return config_dir / "config.toml"


@pytest.fixture
def make_store():
    return FakeStore
