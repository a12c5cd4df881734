"""Reverse-incremental scan of a MySQL slow query log.

The log is walked from its last line toward its first. Each ``# Time:``
header closes one entry; the scan stops at the first entry that is not newer
than the watermark, so the work done is bounded by the number of new entries
rather than by the size of the file.

With no entry watermark yet (first run), only the newest complete entry is
examined: it seeds the watermark instead of alerting on the whole history.
"""

import logging
from typing import Iterable

from slowlog.accumulator import RecordAccumulator, Signal
from slowlog.errors import LogAccessError, LogNotFoundError, LogPermissionError
from slowlog.models import ScanResult, SlowQueryRecord, Watermark
from slowlog.reverse_reader import DEFAULT_CHUNK_SIZE, CountingLines, reverse_lines
from slowlog.watermark import WatermarkTracker

logger = logging.getLogger(__name__)


def scan_lines(
    lines: Iterable[str],
    watermark: Watermark,
    minimum_query_time: float = 0.0,
) -> ScanResult:
    """Run the scan over *lines*, which must be ordered newest-first."""
    tracker = WatermarkTracker(watermark)
    first_run = tracker.is_first_run
    accumulator = RecordAccumulator()
    counted = CountingLines(lines)

    accepted: list[SlowQueryRecord] = []
    newest_timestamp = None

    try:
        for line in counted:
            result = accumulator.feed(line)
            if result.signal is not Signal.ENTRY_BOUNDARY:
                continue

            timestamp = result.timestamp
            if not tracker.should_accept(timestamp):
                logger.debug("Reached already-reported entry at %s, stopping", timestamp)
                break

            candidate = accumulator.take_candidate()
            if candidate is not None and candidate.query_time >= minimum_query_time:
                accepted.append(SlowQueryRecord.from_candidate(candidate, timestamp))

            if newest_timestamp is None:
                newest_timestamp = timestamp

            if first_run:
                logger.debug("First run: seeding watermark from entry at %s", timestamp)
                break
    finally:
        counted.close()

    return ScanResult(
        accepted=tuple(accepted),
        newest_timestamp=newest_timestamp,
        lines_read=counted.count,
    )


def scan(
    path: str,
    watermark: Watermark,
    minimum_query_time: float = 0.0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ScanResult:
    """Scan the slow log at *path* for entries newer than *watermark*.

    Raises:
        LogNotFoundError: the file does not exist when the scan starts.
        LogPermissionError, LogAccessError: the file cannot be read.
        MalformedTimestampError: a ``# Time:`` header cannot be parsed.
    """
    lines = reverse_lines(path, chunk_size=chunk_size)
    try:
        # Prime the generator so a missing file surfaces here.
        first = next(lines, None)
        if first is None:
            logger.info("Slow log %s is empty", path)
            return ScanResult()
        result = scan_lines(_prepend(first, lines), watermark, minimum_query_time)
    except FileNotFoundError:
        raise LogNotFoundError.for_path(path) from None
    except PermissionError:
        raise LogPermissionError.for_path(path) from None
    except OSError as exc:
        raise LogAccessError.for_path(path, exc.strerror or str(exc)) from None

    logger.info(
        "Scanned %s: %d lines read, %d slow queries accepted",
        path, result.lines_read, len(result.accepted),
    )
    return result


def _prepend(first: str, rest):
    yield first
    try:
        yield from rest
    finally:
        rest.close()
