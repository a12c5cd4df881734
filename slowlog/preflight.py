"""Pre-flight check that the slow log can be read before a cycle starts."""

import os

from slowlog.errors import (
    SLOW_LOG_DOCS_URL,
    ConfigError,
    LogAccessError,
    LogNotFoundError,
    LogPermissionError,
)


def check_file_readable(path: str | None) -> int:
    """Ensure a path was given and the file exists and can be sized.

    Returns the file size in bytes.

    Raises:
        ConfigError: no path was supplied.
        LogPermissionError: the file exists but cannot be accessed.
        LogNotFoundError: the file does not exist.
        LogAccessError: any other OS-level failure.
    """
    if not path or not path.strip():
        raise ConfigError(
            "The full path to the slow queries log must be provided. Learn more "
            f"about enabling the slow queries log here: {SLOW_LOG_DOCS_URL}",
            title="A path to the MySQL Slow Query log file wasn't provided.",
        )

    # os.path.exists() reports False for an unreadable file; stat-ing it
    # tells a permission problem apart from a missing file.
    try:
        size = os.path.getsize(path)
    except PermissionError:
        raise LogPermissionError.for_path(path) from None
    except FileNotFoundError:
        raise LogNotFoundError.for_path(path) from None
    except OSError as exc:
        raise LogAccessError.for_path(path, exc.strerror or str(exc)) from None

    if os.path.isdir(path):
        raise LogAccessError.for_path(path, "is a directory")
    if not os.access(path, os.R_OK):
        raise LogPermissionError.for_path(path)
    return size
