"""slowlog: report MySQL slow queries added since the previous run."""

import logging
import sys
from argparse import ArgumentParser

from slowlog.config import OUTPUT_FORMATS, load_config
from slowlog.errors import ConfigError, MonitorError
from slowlog.formatter import get_formatter
from slowlog.memory import open_memory_store
from slowlog.monitor import SlowQueryMonitor
from slowlog.sinks import CollectingSink, LoggingSink

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="slowlog",
        description="Report MySQL slow queries logged since the previous run.",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML config file (default: $SLOWLOG_CONFIG)",
    )
    parser.add_argument(
        "--mysql-slow-log",
        help="Full path to the MySQL slow queries log file",
    )
    parser.add_argument(
        "--minimum-query-time",
        type=float,
        help="Ignore queries faster than this many seconds (default: 0)",
    )
    parser.add_argument(
        "--state-file",
        help="JSON file holding the watermark between runs",
    )
    parser.add_argument(
        "--redis-url",
        help="Keep the watermark in Redis instead of the state file",
    )
    parser.add_argument(
        "--namespace",
        dest="memory_namespace",
        help="Redis key namespace (default: slowlog)",
    )
    parser.add_argument(
        "--output",
        choices=OUTPUT_FORMATS,
        help="Output format; 'log' writes the outcome to the log instead of stdout (default: text)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: INFO)",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [slowlog] %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def run(args) -> int:
    """Run a single report cycle and print its outcome. Returns the exit code."""
    sink = CollectingSink()
    try:
        config = load_config(args)
    except ConfigError as exc:
        _configure_logging("INFO")
        sink.error(exc.title, exc.message)
        print(get_formatter(getattr(args, "output", None) or "text")(sink))
        return 1

    _configure_logging(config.log_level)
    logger.debug("Config: %s", config)
    if config.output == "log":
        sink = LoggingSink()

    try:
        store = open_memory_store(config)
    except MonitorError as exc:
        sink.error(exc.title, exc.message)
        completed = False
    else:
        monitor = SlowQueryMonitor.from_config(config, store, sink)
        completed = monitor.build_report()

    if isinstance(sink, CollectingSink):
        print(get_formatter(config.output)(sink))
    return 0 if completed else 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except KeyboardInterrupt:
        return 0
    except BrokenPipeError:
        return 0


if __name__ == "__main__":
    sys.exit(main())
