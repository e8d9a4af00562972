"""
Tests for the Grammar Engine.

Splitting happens on unescaped delimiters only and never unescapes.
"""

import pytest

from udsv.errors import MalformedMapItem
from udsv.grammar import (
    Segment,
    join,
    split_lines,
    split_list,
    split_map,
    split_record,
    split_spans,
)


class TestSplitRecord:
    """Fields are separated by unescaped ':'."""

    def test_simple(self):
        assert split_record("root:x:0:0") == ["root", "x", "0", "0"]

    def test_empty_fields_kept(self):
        assert split_record("a:b::c") == ["a", "b", "", "c"]

    def test_escaped_colon_not_a_split_point(self):
        assert split_record(r"a\:b:c") == [r"a\:b", "c"]

    def test_escaped_backslash_then_colon_splits(self):
        """\\\\: is an escaped backslash followed by a real delimiter."""
        assert split_record(r"a\\:b") == [r"a\\", "b"]

    def test_comma_and_equals_ignored(self):
        assert split_record("a,b=c:d") == ["a,b=c", "d"]

    def test_empty_record_is_one_empty_field(self):
        assert split_record("") == [""]


class TestSplitSpans:
    """Offsets of split parts."""

    def test_offsets(self):
        assert split_spans("ab:c:de", ":") == [
            Segment("ab", 0),
            Segment("c", 3),
            Segment("de", 5),
        ]

    def test_base_offset(self):
        assert split_spans("a,b", ",", base=10) == [Segment("a", 10), Segment("b", 12)]


class TestSplitList:
    """List items are separated by unescaped ','."""

    def test_escaped_comma(self):
        assert split_list(r"a,b\,c,d") == ["a", r"b\,c", "d"]

    def test_empty_items(self):
        assert split_list("a,,b") == ["a", "", "b"]

    def test_equals_not_special(self):
        assert split_list("a=c,b") == ["a=c", "b"]


class TestSplitMap:
    """Map items are 'key=value' separated by ','."""

    def test_pairs(self):
        assert split_map(r"k=v,x=y\=z") == [("k", "v"), ("x", r"y\=z")]

    def test_empty_map(self):
        assert split_map("") == []

    def test_empty_key_and_value_allowed(self):
        assert split_map("=") == [("", "")]

    def test_two_equals_fails(self):
        with pytest.raises(MalformedMapItem) as exc:
            split_map("a=b=c")
        assert exc.value.fragment == "a=b=c"
        assert exc.value.offset == 3

    def test_missing_equals_fails(self):
        """Comma before the equals of the next pair."""
        with pytest.raises(MalformedMapItem) as exc:
            split_map("a=b,cx,y=d")
        assert exc.value.fragment == "cx"
        assert exc.value.offset == 4

    def test_trailing_comma_fails(self):
        with pytest.raises(MalformedMapItem) as exc:
            split_map("a=b,")
        assert exc.value.fragment == ""


class TestSplitLines:
    """Records are separated by unescaped LF."""

    def test_trailing_newline_dropped(self):
        assert split_lines("a:b\nc:d\n") == ["a:b", "c:d"]

    def test_continuation_stays_in_record(self):
        assert split_lines("a\\\nb\nc") == ["a\\\nb", "c"]

    def test_blank_record_in_middle_kept(self):
        assert split_lines("a\n\nb") == ["a", "", "b"]


class TestJoin:
    """Joining is plain concatenation of already-escaped parts."""

    def test_join(self):
        assert join(["a", r"b\,c", "d"], ",") == r"a,b\,c,d"

    def test_join_empty(self):
        assert join([], ":") == ""
