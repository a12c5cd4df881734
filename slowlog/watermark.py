"""Tracks the newest slow log entry already reported.

The watermark is persisted in a memory store under two keys, both holding
ISO-8601 strings (or nothing):

  * ``last_run``                 - when the previous report cycle finished
  * ``last_run_entry_timestamp`` - ``# Time:`` of the newest entry seen so far, in UTC

Both keys are written together in one store update.
"""

import logging
from datetime import datetime

from slowlog.memory import MemoryStore
from slowlog.models import Watermark
from slowlog.timestamps import to_naive_utc

logger = logging.getLogger(__name__)

LAST_RUN_KEY = "last_run"
LAST_ENTRY_KEY = "last_run_entry_timestamp"


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value, local: bool = False) -> datetime | None:
    """Read a stored timestamp back as a naive datetime.

    Entry timestamps are naive UTC, ``last_run`` is naive local time (it comes
    from the monitor clock). A value stored with an offset is converted to
    whichever of the two *local* asks for.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning("Ignoring unreadable stored timestamp %r", value)
            return None
    if parsed.tzinfo is None:
        return parsed
    if local:
        return parsed.astimezone().replace(tzinfo=None)
    return to_naive_utc(parsed)


class WatermarkTracker:
    def __init__(self, watermark: Watermark | None = None):
        self.watermark = watermark or Watermark()

    @classmethod
    def load(cls, store: MemoryStore) -> "WatermarkTracker":
        watermark = Watermark(
            last_run=_from_iso(store.get(LAST_RUN_KEY), local=True),
            last_entry_timestamp=_from_iso(store.get(LAST_ENTRY_KEY)),
        )
        logger.debug(
            "Loaded watermark: last_run=%s last_entry=%s",
            watermark.last_run, watermark.last_entry_timestamp,
        )
        return cls(watermark)

    @property
    def is_first_run(self) -> bool:
        return self.watermark.last_entry_timestamp is None

    def should_accept(self, timestamp: datetime) -> bool:
        """True when *timestamp* is newer than everything already reported."""
        last = self.watermark.last_entry_timestamp
        return last is None or timestamp > last

    def commit(self, newest_timestamp: datetime | None, now: datetime) -> Watermark:
        """Produce the watermark for the next cycle and adopt it."""
        last = self.watermark.last_entry_timestamp
        if newest_timestamp is not None and (last is None or newest_timestamp > last):
            last = newest_timestamp
        self.watermark = Watermark(last_run=now, last_entry_timestamp=last)
        return self.watermark

    def save(self, store: MemoryStore) -> None:
        store.set_many({
            LAST_RUN_KEY: _to_iso(self.watermark.last_run),
            LAST_ENTRY_KEY: _to_iso(self.watermark.last_entry_timestamp),
        })
