"""
Tests for the Escape Codec (leaf layer).

Escaping depends on the grammar position of the scalar; unescaping does not.
"""

import pytest

from udsv.errors import InvalidEscape
from udsv.escaping import Position, escape, unescape


class TestEscape:
    """Raw text -> escaped text."""

    def test_colon_escaped_in_plain_field(self):
        assert escape("a:b") == r"a\:b"

    def test_backslash_escaped(self):
        assert escape("a\\b") == r"a\\b"

    def test_control_characters_use_letters(self):
        """LF, CR and TAB become \\n, \\r, \\t."""
        assert escape("a\nb") == r"a\nb"
        assert escape("a\rb") == r"a\rb"
        assert escape("a\tb") == r"a\tb"

    def test_comma_and_equals_left_alone_in_plain_field(self):
        assert escape("a,b=c") == "a,b=c"

    def test_comma_escaped_in_list_item(self):
        assert escape("a,c", Position.LIST_ITEM) == r"a\,c"

    def test_equals_left_alone_in_list_item(self):
        assert escape("a=c", Position.LIST_ITEM) == "a=c"

    def test_map_positions_escape_all_delimiters(self):
        assert escape("x:y,z=w", Position.MAP_KEY) == r"x\:y\,z\=w"
        assert escape("y=z", Position.MAP_VALUE) == r"y\=z"

    def test_explicit_special_set(self):
        """A custom set still always escapes the backslash."""
        assert escape("a;b\\c", {";"}) == r"a\;b\\c"

    def test_no_double_escaping(self):
        """Mixed delimiters and backslash escape exactly once each."""
        assert escape("a:b,c=d\\e") == r"a\:b,c=d\\e"


class TestUnescape:
    """Escaped text -> raw text."""

    def test_literal_escapes(self):
        assert unescape(r"a\:b\,c\=d\\e") == "a:b,c=d\\e"

    def test_control_escapes(self):
        assert unescape(r"a\nb\tc\rd") == "a\nb\tc\rd"

    def test_escaped_newline_is_removed(self):
        """Backslash-LF is a line continuation."""
        assert unescape("a\\:b\\,c\\=d\\\ne") == "a:b,c=de"

    def test_escaped_backslash_before_letter(self):
        """\\\\n is a backslash followed by 'n', not a newline."""
        assert unescape(r"a\\n") == "a\\n"

    def test_plain_text_unchanged(self):
        assert unescape("hello world") == "hello world"

    def test_unknown_escape_fails(self):
        with pytest.raises(InvalidEscape) as exc:
            unescape(r"a\zb")
        assert exc.value.fragment == r"\z"
        assert exc.value.offset == 1

    def test_dangling_backslash_fails(self):
        with pytest.raises(InvalidEscape) as exc:
            unescape("abc\\")
        assert exc.value.offset == 3


class TestPositions:
    """Special-character sets per grammar position."""

    def test_plain_specials(self):
        specials = Position.PLAIN.specials
        assert ":" in specials
        assert "," not in specials
        assert "=" not in specials

    def test_list_item_specials(self):
        specials = Position.LIST_ITEM.specials
        assert "," in specials
        assert "=" not in specials

    def test_every_position_escapes_controls(self):
        for position in Position:
            assert {"\\", "\n", "\r", "\t"} <= position.specials

    @pytest.mark.parametrize("position", list(Position))
    def test_round_trip(self, position):
        raw = "user:name,with=all\\kinds\tof\nstuff"
        assert unescape(escape(raw, position)) == raw
