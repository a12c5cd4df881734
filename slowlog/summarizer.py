"""Turns accepted slow queries into a per-minute rate and an alert."""

from typing import Sequence

from slowlog.models import Alert, SlowQueryRecord, Summary

# Only the first MAX_QUERIES queries are listed, to bound the alert body size.
MAX_QUERIES = 10
MAX_SQL_CHARS = 500


def rate_per_minute(count: int, elapsed_seconds: float) -> float:
    """Queries per minute, with elapsed time floored at one second."""
    return count / max(elapsed_seconds, 1) * 60


def _truncate_sql(sql: str) -> str:
    if len(sql) > MAX_SQL_CHARS:
        return sql[:MAX_SQL_CHARS] + "..."
    return sql


def build_alert(records: Sequence[SlowQueryRecord], log_file_path: str) -> Alert:
    count = len(records)
    noun = "queries" if count > 1 else "query"
    subject = f"Maximum Query Time exceeded on {count} {noun}"

    parts = []
    for record in records[:MAX_QUERIES]:
        parts.append(f"<strong>{record.query_time} sec query on {record.observed_at}:</strong>\n")
        parts.append(_truncate_sql(record.sql))
        parts.append("\n\n")

    if count > MAX_QUERIES:
        parts.append(
            f"{count - MAX_QUERIES} more slow queries occurred. See the slow queries "
            f"log file (located at {log_file_path}) for more details."
        )
    return Alert(subject=subject, body="".join(parts))


def summarize(
    accepted: Sequence[SlowQueryRecord],
    elapsed_seconds: float,
    log_file_path: str = "",
) -> Summary:
    alert = build_alert(accepted, log_file_path) if accepted else None
    return Summary(rate_per_minute=rate_per_minute(len(accepted), elapsed_seconds), alert=alert)
