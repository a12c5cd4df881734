"""Shared pytest fixtures for the slow query monitor test suite."""

import os
import time

import pytest


def _use_timezone(name):
    if name is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = name
    time.tzset()


@pytest.fixture(autouse=True)
def host_timezone():
    """Run every test with host local time pinned to UTC.

    Yields a function that switches the host zone for the rest of the test.
    """
    saved = os.environ.get("TZ")
    _use_timezone("UTC")
    yield _use_timezone
    _use_timezone(saved)


def _entry_lines(time_header, query_time, sql, db=None, rows_examined=10):
    lines = [
        f"# Time: {time_header}\n",
        "# User@Host: root[root] @ localhost []\n",
        f"# Query_time: {query_time}  Lock_time: 0  Rows_sent: 1  Rows_examined: {rows_examined}\n",
    ]
    if db:
        lines.append(f"use {db};\n")
        lines.append("SET timestamp=1212763346;\n")
    lines.extend(line + "\n" for line in sql.splitlines())
    return lines


@pytest.fixture()
def make_entry():
    """Return a builder for the lines of one slow log entry."""
    return _entry_lines


@pytest.fixture()
def write_slow_log(tmp_path):
    """Return a function that writes entries (lists of lines) to a slow log file."""

    def _write(entries, name="mysql-slow.log", preamble=True):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            if preamble:
                f.write("/usr/sbin/mysqld, Version: 5.0.51a-log. started with:\n")
                f.write("Tcp port: 3306  Unix socket: /var/run/mysqld/mysqld.sock\n")
                f.write("Time                 Id Command    Argument\n")
            for entry in entries:
                f.writelines(entry)
        return str(path)

    return _write


@pytest.fixture()
def three_entries(make_entry):
    """Entries at t1 < t2 < t3, oldest first as MySQL writes them."""
    return [
        make_entry("080606 15:22:26", 21, "SELECT * FROM reports;"),
        make_entry("080606 15:25:00", 3.5, "SELECT id\nFROM users\nWHERE name = 'bob';", db="forum"),
        make_entry("080606 15:30:12", 0.25, "UPDATE sessions SET seen = NOW();"),
    ]
