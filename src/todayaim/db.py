import sqlite3
import os
import logging
import functools
from contextlib import closing
from datetime import datetime
from typing import List, Optional
import platform

from .model import Aim, offset_in_range

logger = logging.getLogger(__name__)

if platform.system() == "Windows":
    base_dir = os.environ.get("LOCALAPPDATA", os.path.expanduser("~"))
    DB_PATH = os.path.join(base_dir, "todayaim", "todayaim.db")
else:
    DB_PATH = os.path.expanduser("~/.local/share/todayaim.db")


def get_db():
    os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    try:
        _migrate(conn)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _migrate(conn):
    c = conn.cursor()

    c.execute('''CREATE TABLE IF NOT EXISTS aims
                 (id INTEGER PRIMARY KEY, description TEXT, offset_from_today INTEGER DEFAULT 0,
                  is_accomplished INTEGER DEFAULT 0, is_favorited INTEGER DEFAULT 0, created_at TEXT)''')

    # MIGRATIONS
    c.execute("PRAGMA table_info(aims)")
    columns = [info[1] for info in c.fetchall()]
    if 'is_favorited' not in columns:
        c.execute("ALTER TABLE aims ADD COLUMN is_favorited INTEGER DEFAULT 0")
    if 'created_at' not in columns:
        c.execute("ALTER TABLE aims ADD COLUMN created_at TEXT")

    conn.commit()


def best_effort(func):
    """
    Writes never raise to the caller. A failed write is logged and the
    caller sees the last successful state on its next read.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as e:
            logger.warning("%s failed: %s", func.__name__, e)
            return None
    return wrapper


def _row_to_aim(row) -> Aim:
    return Aim(id=row[0], description=row[1] or "", offset_from_today=row[2] or 0,
               is_accomplished=bool(row[3]), is_favorited=bool(row[4]))


def get_all_aims() -> List[Aim]:
    with closing(get_db()) as conn:
        c = conn.cursor()
        c.execute(
            "SELECT id, description, offset_from_today, is_accomplished, is_favorited FROM aims ORDER BY id")
        rows = c.fetchall()
    return [_row_to_aim(r) for r in rows]


def get_aim(aim_id: int) -> Optional[Aim]:
    with closing(get_db()) as conn:
        c = conn.cursor()
        c.execute(
            "SELECT id, description, offset_from_today, is_accomplished, is_favorited FROM aims WHERE id = ?", (aim_id,))
        row = c.fetchone()
    return _row_to_aim(row) if row else None


@best_effort
def add_aim(description: str, offset_from_today: int = 0) -> Optional[int]:
    if not offset_in_range(offset_from_today):
        logger.warning("Refusing aim '%s': offset %s is outside the calendar",
                       description, offset_from_today)
        return None
    with closing(get_db()) as conn:
        c = conn.cursor()
        c.execute("INSERT INTO aims (description, offset_from_today, is_accomplished, is_favorited, created_at) VALUES (?, ?, 0, 0, ?)",
                  (description, offset_from_today, datetime.now().isoformat()))
        conn.commit()
        return c.lastrowid


@best_effort
def delete_aim(aim_id: int):
    with closing(get_db()) as conn:
        conn.execute("DELETE FROM aims WHERE id = ?", (aim_id,))
        conn.commit()


@best_effort
def set_favorite(aim_id: int, value: bool):
    with closing(get_db()) as conn:
        conn.execute("UPDATE aims SET is_favorited = ? WHERE id = ?",
                     (int(value), aim_id))
        conn.commit()


@best_effort
def set_accomplished(aim_id: int, value: bool):
    with closing(get_db()) as conn:
        conn.execute("UPDATE aims SET is_accomplished = ? WHERE id = ?",
                     (int(value), aim_id))
        conn.commit()
