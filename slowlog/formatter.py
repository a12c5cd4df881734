"""Render the outcome of one report cycle for the terminal."""

import json

from slowlog.sinks import CollectingSink


def format_text(sink: CollectingSink) -> str:
    lines = []
    for error in sink.errors:
        lines.append(f"ERROR: {error['title']}")
        lines.append(f"  {error['message']}")

    for report in sink.reports:
        for name, value in report.items():
            lines.append(f"{name}: {value:.2f}/min")

    for alert in sink.alerts:
        lines.append("")
        lines.append(f"ALERT: {alert['subject']}")
        lines.append(alert["body"].rstrip("\n"))

    return "\n".join(lines)


def format_json(sink: CollectingSink) -> str:
    return json.dumps({
        "reports": sink.reports,
        "alerts": sink.alerts,
        "errors": sink.errors,
    }, indent=2)


def get_formatter(output_format: str = "text"):
    if output_format == "json":
        return format_json
    return format_text
