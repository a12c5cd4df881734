"""Destinations for what a report cycle produces."""

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ReportSink(Protocol):
    def report(self, metrics: dict) -> None: ...

    def alert(self, subject: str, body: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...


@dataclass
class CollectingSink:
    """Keeps everything it receives, in order."""

    reports: list[dict] = field(default_factory=list)
    alerts: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    def report(self, metrics: dict) -> None:
        self.reports.append(dict(metrics))

    def alert(self, subject: str, body: str) -> None:
        self.alerts.append({"subject": subject, "body": body})

    def error(self, title: str, message: str) -> None:
        self.errors.append({"title": title, "message": message})


class LoggingSink:
    def report(self, metrics: dict) -> None:
        for name, value in metrics.items():
            logger.info("[report] %s=%s", name, value)

    def alert(self, subject: str, body: str) -> None:
        logger.warning("[alert] %s", subject)
        logger.debug("[alert] body:\n%s", body)

    def error(self, title: str, message: str) -> None:
        logger.error("[error] %s: %s", title, message)

