"""
Tests for multi-record text built on the single-record codec.
"""

from dataclasses import dataclass
from typing import List

import pytest

from udsv.codec import iter_records, records_from_text, records_to_text
from udsv.errors import InvalidNumber


@dataclass
class Group:
    name: str
    gid: int
    members: List[str]


GROUPS = "wheel:10:root,alice\nusers:100:\n"


class TestRecords:
    """LF-delimited records."""

    def test_decode_all(self):
        assert records_from_text(GROUPS, Group) == [
            Group("wheel", 10, ["root", "alice"]),
            Group("users", 100, []),
        ]

    def test_encode_all(self):
        values = [Group("wheel", 10, ["root", "alice"]), Group("users", 100, [])]
        assert records_to_text(values, Group) == GROUPS

    def test_empty_text(self):
        assert records_from_text("", Group) == []
        assert records_to_text([], Group) == ""

    def test_escaped_newline_inside_value(self):
        """A newline in a value is written as \\n and never splits records."""
        text = records_to_text([Group("a\nb", 1, [])], Group)
        assert text == "a\\nb:1:\n"
        assert records_from_text(text, Group) == [Group("a\nb", 1, [])]

    def test_continuation_line(self):
        assert records_from_text("whe\\\nel:10:root\n", Group) == [Group("wheel", 10, ["root"])]

    def test_error_reports_line(self):
        with pytest.raises(InvalidNumber) as exc:
            list(iter_records("a:1:\nb:x:\n", Group))
        assert exc.value.line == 2
        assert exc.value.offset == 2
        assert "line 2" in str(exc.value)

    def test_iter_is_lazy(self):
        records = iter_records("a:1:\nb:x:\n", Group)
        assert next(records) == Group("a", 1, [])
        with pytest.raises(InvalidNumber):
            next(records)
