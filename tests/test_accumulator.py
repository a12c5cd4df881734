"""Tests for the record accumulator."""

from datetime import datetime

import pytest

from slowlog.accumulator import RecordAccumulator, Signal
from slowlog.errors import MalformedTimestampError


def feed_reversed(accumulator, lines):
    return [accumulator.feed(line) for line in reversed(lines)]


class TestLineClassification:
    def test_query_time_header(self):
        acc = RecordAccumulator()
        result = acc.feed("# Query_time: 2.5  Lock_time: 0  Rows_sent: 1  Rows_examined: 9\n")
        assert result.signal is Signal.CANDIDATE_READY
        assert acc.candidate.query_time == 2.5

    def test_time_header(self):
        acc = RecordAccumulator()
        result = acc.feed("# Time: 080606 15:22:26\n")
        assert result.signal is Signal.ENTRY_BOUNDARY
        assert result.timestamp == datetime(2008, 6, 6, 15, 22, 26)

    def test_iso_time_header(self):
        acc = RecordAccumulator()
        result = acc.feed("# Time: 2019-03-04T05:06:07.000000Z\n")
        assert result.timestamp == datetime(2019, 3, 4, 5, 6, 7)

    @pytest.mark.parametrize("line", [
        "# User@Host: root[root] @ localhost []\n",
        "use forum;\n",
        "SET timestamp=1212763346;\n",
        "# Query_time: 21\n",
        "#\n",
    ])
    def test_ignored_lines(self, line):
        acc = RecordAccumulator()
        assert acc.feed(line).signal is Signal.IGNORED
        assert acc.pending_lines == ()

    def test_sql_line(self):
        acc = RecordAccumulator()
        assert acc.feed("SELECT 1;\n").signal is Signal.SQL_LINE
        assert acc.pending_lines == ("SELECT 1;\n",)

    def test_malformed_time_header_raises(self):
        acc = RecordAccumulator()
        with pytest.raises(MalformedTimestampError):
            acc.feed("# Time: not a time\n")

    def test_time_header_does_not_touch_sql_buffer(self):
        acc = RecordAccumulator()
        acc.feed("SELECT 1;\n")
        acc.feed("# Time: 080606 15:22:26\n")
        assert acc.pending_lines == ("SELECT 1;\n",)


class TestCandidateAssembly:
    def test_sql_restored_to_forward_order(self):
        lines = [
            "# Query_time: 3  Lock_time: 1  Rows_sent: 18  Rows_examined: 8157\n",
            "SELECT id\n",
            "FROM users\n",
            "WHERE name = 'bob';\n",
        ]
        acc = RecordAccumulator()
        feed_reversed(acc, lines)
        candidate = acc.candidate
        assert candidate.sql_lines == ("SELECT id\n", "FROM users\n", "WHERE name = 'bob';\n")
        assert candidate.query_time == 3.0
        assert candidate.lock_time == 1.0
        assert candidate.rows_sent == 18
        assert candidate.rows_examined == 8157

    def test_use_and_set_timestamp_skipped(self):
        lines = [
            "# Query_time: 1.5  Lock_time: 0.000100 Rows_sent: 1  Rows_examined: 0\n",
            "use forum;\n",
            "SET timestamp=1212763346;\n",
            "SELECT 1;\n",
        ]
        acc = RecordAccumulator()
        feed_reversed(acc, lines)
        assert acc.candidate.sql_lines == ("SELECT 1;\n",)
        assert acc.candidate.lock_time == 0.0001

    def test_block_reset_after_candidate(self):
        acc = RecordAccumulator()
        feed_reversed(acc, ["# Query_time: 1  Lock_time: 0\n", "SELECT 1;\n"])
        assert acc.pending_lines == ()

    def test_header_without_lock_time(self):
        acc = RecordAccumulator()
        acc.feed("# Query_time: 4.25  extra stuff\n")
        assert acc.candidate.query_time == 4.25
        assert acc.candidate.lock_time is None
        assert acc.candidate.rows_examined is None

    def test_newer_candidate_replaces_held_one(self):
        acc = RecordAccumulator()
        acc.feed("SELECT 2;\n")
        acc.feed("# Query_time: 2  Lock_time: 0\n")
        acc.feed("SELECT 1;\n")
        acc.feed("# Query_time: 1  Lock_time: 0\n")
        assert acc.candidate.query_time == 1.0
        assert acc.candidate.sql_lines == ("SELECT 1;\n",)

    def test_take_candidate_clears_it(self):
        acc = RecordAccumulator()
        acc.feed("# Query_time: 1  Lock_time: 0\n")
        assert acc.take_candidate() is not None
        assert acc.candidate is None
        assert acc.take_candidate() is None

    def test_empty_sql_block(self):
        acc = RecordAccumulator()
        acc.feed("# Query_time: 1  Lock_time: 0\n")
        assert acc.candidate.sql_lines == ()

    def test_long_statement_kept_in_forward_order(self):
        acc = RecordAccumulator()
        lines = [f"  OR id = {i}\n" for i in range(5000)]
        feed_reversed(acc, ["# Query_time: 9  Lock_time: 0\n"] + lines)
        assert acc.candidate.sql_lines == tuple(lines)
        assert acc.pending_lines == ()
