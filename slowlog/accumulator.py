"""Groups slow log lines, fed newest-first, into candidate entries.

A slow log entry looks like::

    # Time: 080606 15:22:26
    # User@Host: root[root] @ localhost []
    # Query_time: 21  Lock_time: 0  Rows_sent: 18  Rows_examined: 8157
    use forum;
    SET timestamp=1212763346;
    SELECT ...;

Reading backward, the SQL arrives first, then the ``Query_time`` header that
closes it into a candidate, then the ``Time`` header that dates it.
"""

import enum
import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from slowlog.models import CandidateEntry
from slowlog.timestamps import parse_time_header

logger = logging.getLogger(__name__)

QUERY_TIME_RE = re.compile(
    r"^# Query_time: (?P<query_time>\d+(?:\.\d+)?)\s+"
    r"(?:Lock_time: (?P<lock_time>\d+(?:\.\d+)?)\s*)?"
    r"(?:Rows_sent: (?P<rows_sent>\d+)\s*)?"
    r"(?:Rows_examined: (?P<rows_examined>\d+))?"
    r".*$"
)
TIME_HEADER_PREFIX = "# Time:"
IGNORED_RE = re.compile(r"^(#|use |SET timestamp)")


class Signal(enum.Enum):
    SQL_LINE = "sql-line"
    IGNORED = "ignored"
    CANDIDATE_READY = "candidate-ready"
    ENTRY_BOUNDARY = "entry-boundary"


@dataclass(frozen=True)
class FeedResult:
    signal: Signal
    timestamp: datetime | None = None


def _optional_float(value: str | None) -> float | None:
    return float(value) if value is not None else None


def _optional_int(value: str | None) -> int | None:
    return int(value) if value is not None else None


class RecordAccumulator:
    def __init__(self):
        self._block: deque[str] = deque()
        self._candidate: CandidateEntry | None = None

    @property
    def candidate(self) -> CandidateEntry | None:
        return self._candidate

    @property
    def pending_lines(self) -> tuple[str, ...]:
        return tuple(self._block)

    def feed(self, line: str) -> FeedResult:
        """Classify one physical line and update the buffered state.

        Raises MalformedTimestampError for a ``# Time:`` header whose value
        cannot be parsed.
        """
        text = line.rstrip("\r\n")

        m = QUERY_TIME_RE.match(text)
        if m:
            self._finalize(m)
            return FeedResult(Signal.CANDIDATE_READY)

        if text.startswith(TIME_HEADER_PREFIX):
            timestamp = parse_time_header(text[len(TIME_HEADER_PREFIX):])
            return FeedResult(Signal.ENTRY_BOUNDARY, timestamp)

        if IGNORED_RE.match(text):
            return FeedResult(Signal.IGNORED)

        # Lines arrive last-first; prepend to keep forward order.
        self._block.appendleft(line)
        return FeedResult(Signal.SQL_LINE)

    def take_candidate(self) -> CandidateEntry | None:
        """Hand over the held candidate and forget it."""
        candidate, self._candidate = self._candidate, None
        return candidate

    def _finalize(self, m: re.Match) -> None:
        if self._candidate is not None:
            logger.debug(
                "Replacing unclaimed candidate (query_time=%s) before its Time header",
                self._candidate.query_time,
            )
        self._candidate = CandidateEntry(
            query_time=float(m.group("query_time")),
            sql_lines=tuple(self._block),
            lock_time=_optional_float(m.group("lock_time")),
            rows_sent=_optional_int(m.group("rows_sent")),
            rows_examined=_optional_int(m.group("rows_examined")),
        )
        self._block.clear()
