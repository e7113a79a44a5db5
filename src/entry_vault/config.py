import os
import logging

# Seconds of inactivity before the application hides secrets again
DEFAULT_IDLE_TIMEOUT = 60
MAX_IDLE_TIMEOUT = 65535

# Title carried by the placeholder entry returned for unknown ids
NOT_FOUND_TITLE = "Not found"

# Dynamic field every new entry starts with
DEFAULT_FIELD_NAME = "Note"

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

IDLE_TIMEOUT_ENV = "ENTRY_VAULT_IDLE_TIMEOUT"
LOG_LEVEL_ENV = "ENTRY_VAULT_LOG_LEVEL"


def idle_timeout_from_env(default: int = DEFAULT_IDLE_TIMEOUT) -> int:
    """Read the idle timeout override, falling back to the default on bad values."""
    raw = os.environ.get(IDLE_TIMEOUT_ENV)
    if raw is None:
        return default
    try:
        seconds = int(raw)
    except ValueError:
        logging.warning(f"Ignoring {IDLE_TIMEOUT_ENV}={raw!r}: not an integer")
        return default
    if not 1 <= seconds <= MAX_IDLE_TIMEOUT:
        logging.warning(f"Ignoring {IDLE_TIMEOUT_ENV}={seconds}: out of range")
        return default
    return seconds


def log_level_from_env(default: int = logging.WARNING) -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default
