"""Error taxonomy for the report cycle.

Every error carries a short ``title`` and a longer ``message`` meant for the
error sink. The file-access errors also subclass the matching builtin so that
callers catching ``FileNotFoundError`` / ``PermissionError`` keep working.
"""

SLOW_LOG_DOCS_URL = "http://dev.mysql.com/doc/refman/5.1/en/slow-query-log.html"


class MonitorError(Exception):
    """Base class for failures that end a report cycle."""

    title = "Slow query monitor failure"

    def __init__(self, message: str, title: str | None = None):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class ConfigError(MonitorError):
    title = "Invalid slow query monitor configuration"


class LogNotFoundError(MonitorError, FileNotFoundError):
    title = "Unable to find the MySQL Slow Query log file"

    @classmethod
    def for_path(cls, path: str) -> "LogNotFoundError":
        return cls(
            f"Could not find a MySQL Slow Query log file at: {path}. "
            "Please ensure the path is correct."
        )


class LogPermissionError(MonitorError, PermissionError):
    title = "The MySQL Slow Query log file isn't readable"

    @classmethod
    def for_path(cls, path: str) -> "LogPermissionError":
        return cls(
            f"The log file at {path} isn't readable by the user running the "
            "monitor. Please update the file permissions to give the user access."
        )


class LogAccessError(MonitorError, OSError):
    title = "Unable to read the MySQL Slow Query log file"

    @classmethod
    def for_path(cls, path: str, reason: str) -> "LogAccessError":
        return cls(f"The log file at: {path} couldn't be accessed ({reason}).")


class MalformedTimestampError(MonitorError, ValueError):
    title = "Unparseable timestamp in the MySQL Slow Query log file"

    def __init__(self, value: str):
        super().__init__(
            f"The '# Time:' header value {value!r} matches neither the "
            "'yymmdd hh:mm:ss' nor the 'yyyy-mm-ddThh:mm:ss' format."
        )
        self.value = value


class MemoryStoreError(MonitorError):
    title = "Unable to reach the slow query monitor memory store"

    @classmethod
    def for_store(cls, store: str, reason: str) -> "MemoryStoreError":
        return cls(f"The watermark could not be read or written in {store} ({reason}).")
