"""One report cycle: check, scan, summarize, persist, emit."""

import logging
from datetime import datetime
from typing import Callable

from slowlog.errors import MonitorError
from slowlog.memory import MemoryStore
from slowlog.models import ScanResult, Summary
from slowlog.preflight import check_file_readable
from slowlog.reverse_reader import DEFAULT_CHUNK_SIZE
from slowlog.scanner import scan
from slowlog.sinks import ReportSink
from slowlog.summarizer import summarize
from slowlog.watermark import WatermarkTracker

logger = logging.getLogger(__name__)

METRIC_NAME = "slow_queries"


class SlowQueryMonitor:
    """Reports slow queries appended to a MySQL slow log since the last cycle.

    The watermark is read from *store* at the start of ``build_report`` and
    written back before the report and alert are emitted. A cycle that fails
    with a ``MonitorError`` reports only the error to *sink* and leaves the
    store alone, so the next cycle retries from the same point.
    """

    def __init__(
        self,
        log_file_path: str | None,
        store: MemoryStore,
        sink: ReportSink,
        minimum_query_time: float = 0.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._path = (log_file_path or "").strip()
        self._store = store
        self._sink = sink
        self._minimum_query_time = minimum_query_time
        self._chunk_size = chunk_size
        self._clock = clock
        self.last_scan: ScanResult | None = None
        self.last_summary: Summary | None = None

    @classmethod
    def from_config(cls, config, store: MemoryStore, sink: ReportSink) -> "SlowQueryMonitor":
        return cls(
            log_file_path=config.mysql_slow_log,
            store=store,
            sink=sink,
            minimum_query_time=config.minimum_query_time,
            chunk_size=config.chunk_size,
        )

    def build_report(self) -> bool:
        """Run one cycle. Returns False when an error was reported instead."""
        started = self._clock()
        try:
            check_file_readable(self._path)
            tracker = WatermarkTracker.load(self._store)
            result = scan(
                self._path,
                tracker.watermark,
                minimum_query_time=self._minimum_query_time,
                chunk_size=self._chunk_size,
            )
            last_run = tracker.watermark.last_run or started
            elapsed = (started - last_run).total_seconds()
            summary = summarize(result.accepted, elapsed, self._path)

            # A store failure must end the cycle before anything is emitted.
            watermark = tracker.commit(result.newest_timestamp, self._clock())
            tracker.save(self._store)
        except MonitorError as exc:
            logger.warning("%s: %s", exc.title, exc.message)
            self._sink.error(exc.title, exc.message)
            return False

        self._sink.report({METRIC_NAME: summary.rate_per_minute})
        if summary.alert is not None:
            self._sink.alert(summary.alert.subject, summary.alert.body)

        logger.info(
            "Cycle complete: %d new slow queries, %.2f/min, watermark=%s",
            len(result.accepted), summary.rate_per_minute, watermark.last_entry_timestamp,
        )

        self.last_scan = result
        self.last_summary = summary
        return True
