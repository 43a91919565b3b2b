import os
import toml
import shutil
import logging
import platform
import subprocess
import sys

from .model import FilterCriterion

IS_WINDOWS = platform.system() == "Windows"

if IS_WINDOWS:
    CONFIG_DIR = os.path.join(os.environ.get(
        "APPDATA", os.path.expanduser("~")), "todayaim")
else:
    CONFIG_DIR = os.path.expanduser("~/.config/todayaim")

CONFIG_PATH = os.path.join(CONFIG_DIR, "config.toml")
DEFAULT_LOG_FILE = os.path.join(CONFIG_DIR, "todayaim.log")

if IS_WINDOWS:
    DEFAULT_EDITOR = "notepad"
else:
    DEFAULT_EDITOR = "nvim" if shutil.which("nvim") else "vim"

DEFAULTS = {
    "default_filter": FilterCriterion.ALL.value,
    "delete_delay": 0.4,
    "first_weekday": 6,
    "log_level": "WARNING",
}

DEFAULT_CONFIG = f"""
# TodayAim Configuration
# Uncomment lines to override system defaults

# editor = "{DEFAULT_EDITOR}"
# default_filter = "all"        # all | accomplished | favorited
# delete_delay = 0.4            # seconds before a deleted aim leaves the store
# first_weekday = 6             # 0 = Monday ... 6 = Sunday
# log_level = "WARNING"
# log_file = "{DEFAULT_LOG_FILE}"
"""

logger = logging.getLogger(__name__)


def get_system_env():
    """
    Removes PyInstaller's library paths so external apps (nvim, sh)
    don't crash with 'symbol lookup error'.
    """
    env = os.environ.copy()
    if 'LD_LIBRARY_PATH_ORIG' in env:
        env['LD_LIBRARY_PATH'] = env['LD_LIBRARY_PATH_ORIG']
    elif 'LD_LIBRARY_PATH' in env and getattr(sys, 'frozen', False):
        del env['LD_LIBRARY_PATH']
    return env


def ensure_config():
    if not os.path.exists(CONFIG_DIR):
        os.makedirs(CONFIG_DIR)
    if not os.path.exists(CONFIG_PATH):
        with open(CONFIG_PATH, "w") as f:
            f.write(DEFAULT_CONFIG.strip())


def load_config():
    ensure_config()
    try:
        return toml.load(CONFIG_PATH)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read %s: %s", CONFIG_PATH, e)
        return {}


def get_editor():
    """Returns the preferred editor from config -> env -> default."""
    config = load_config()
    if "editor" in config:
        return config["editor"]
    return os.environ.get("EDITOR", DEFAULT_EDITOR)


def get_default_filter() -> FilterCriterion:
    value = load_config().get("default_filter", DEFAULTS["default_filter"])
    try:
        return FilterCriterion.parse(str(value))
    except ValueError as e:
        logger.warning("%s; using 'all'", e)
        return FilterCriterion.ALL


def get_delete_delay() -> float:
    value = load_config().get("delete_delay", DEFAULTS["delete_delay"])
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return DEFAULTS["delete_delay"]


def get_first_weekday() -> int:
    value = load_config().get("first_weekday", DEFAULTS["first_weekday"])
    if isinstance(value, int) and 0 <= value <= 6:
        return value
    return DEFAULTS["first_weekday"]


def setup_logging(level: str = None, log_file: str = None):
    """File logging only; the TUI owns the terminal."""
    config = load_config()
    level = level or config.get("log_level", DEFAULTS["log_level"])
    log_file = log_file or config.get("log_file", DEFAULT_LOG_FILE)
    os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("todayaim")
    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    return handler


def edit_config():
    ensure_config()
    editor = get_editor()
    try:
        subprocess.call(f"{editor} {CONFIG_PATH}",
                        shell=True, env=get_system_env())
    except OSError as e:
        print(f"Error opening editor: {e}")
