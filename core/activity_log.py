"""
core/activity_log.py -- Bounded, append-only session activity log.

Entries are kept in creation order in a deque with maxlen, so appending past
capacity drops the oldest entry without reordering the survivors. The log
offers two read views over the same storage: chronological (dashboard) and
newest-first (audit trail tab).

Each entry is also forwarded to the "flapper.activity" Python logger so the
server console carries the same trail.
"""

import logging
import secrets
import string
from collections import deque

from core.config import local_timestamp
from core.models import LogEntry, LogType

logger = logging.getLogger("flapper.activity")

DEFAULT_CAPACITY = 50

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9

_LEVELS = {
    LogType.info: logging.INFO,
    LogType.success: logging.INFO,
    LogType.warning: logging.WARNING,
    LogType.error: logging.ERROR,
}


def _new_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


class ActivityLog:
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, message: str, type: LogType = LogType.info) -> LogEntry:
        entry = LogEntry(id=_new_id(), timestamp=local_timestamp(), message=message, type=LogType(type))
        self._entries.append(entry)
        logger.log(_LEVELS[entry.type], "[%s] %s", entry.type.value, message)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def all(self) -> list[LogEntry]:
        """Oldest first."""
        return list(self._entries)

    def newest_first(self) -> list[LogEntry]:
        return list(reversed(self._entries))
