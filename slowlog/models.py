"""Records produced and consumed by a slow log scan."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CandidateEntry:
    """A ``Query_time`` header and the SQL that followed it, still waiting
    for the ``Time`` header that dates it."""

    query_time: float
    sql_lines: tuple[str, ...] = ()
    lock_time: float | None = None
    rows_sent: int | None = None
    rows_examined: int | None = None


@dataclass(frozen=True)
class SlowQueryRecord:
    query_time: float
    sql: str
    observed_at: datetime
    lock_time: float | None = None
    rows_sent: int | None = None
    rows_examined: int | None = None

    @classmethod
    def from_candidate(cls, candidate: CandidateEntry, observed_at: datetime) -> "SlowQueryRecord":
        return cls(
            query_time=candidate.query_time,
            sql="".join(candidate.sql_lines),
            observed_at=observed_at,
            lock_time=candidate.lock_time,
            rows_sent=candidate.rows_sent,
            rows_examined=candidate.rows_examined,
        )


@dataclass(frozen=True)
class Watermark:
    last_run: datetime | None = None
    last_entry_timestamp: datetime | None = None


@dataclass(frozen=True)
class ScanResult:
    accepted: tuple[SlowQueryRecord, ...] = ()
    newest_timestamp: datetime | None = None
    lines_read: int = 0


@dataclass(frozen=True)
class Alert:
    subject: str
    body: str


@dataclass(frozen=True)
class Summary:
    rate_per_minute: float
    alert: Alert | None = None
