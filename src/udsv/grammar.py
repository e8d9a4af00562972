"""
Grammar Engine for UDSV records.

Splits record text into fields, fields into list or map items, and map items
into key/value pairs, always on *unescaped* delimiters. The inverse is a
plain join of already-escaped parts.

Nothing here unescapes. Each split part is handed back raw so the caller can
unescape it for its own grammar position.

Grammar:
    file     = record *(LF record) [LF]
    record   = field *(COLON field)
    field    = *STRINGDATA / list / map
    list     = *LISTDATA *(COMMA *LISTDATA)
    map      = map_item *(COMMA map_item)
    map_item = *BASICDATA EQUALS *BASICDATA
"""

from typing import Iterable, List, NamedTuple, Tuple

from udsv.errors import MalformedMapItem
from udsv.escaping import ESCAPE


FIELD_SEP = ":"
ITEM_SEP = ","
PAIR_SEP = "="
RECORD_SEP = "\n"


class Segment(NamedTuple):
    """A raw substring and its character offset in the enclosing record."""

    text: str
    offset: int


def _delimiter_indexes(text: str, delimiter: str) -> List[int]:
    """Indexes of every unescaped occurrence of `delimiter` in `text`."""
    found = []
    escaped = False
    for i, ch in enumerate(text):
        if escaped:
            escaped = False
        elif ch == ESCAPE:
            escaped = True
        elif ch == delimiter:
            found.append(i)
    return found


def split_spans(text: str, delimiter: str, base: int = 0) -> List[Segment]:
    """
    Split `text` on unescaped `delimiter`, keeping offsets.

    Args:
        text: Raw (still escaped) text
        delimiter: Single delimiter character
        base: Offset of `text` within the record

    Returns:
        Segments in order. Empty text yields one empty segment.
    """
    segments = []
    start = 0
    for idx in _delimiter_indexes(text, delimiter):
        segments.append(Segment(text[start:idx], base + start))
        start = idx + 1
    segments.append(Segment(text[start:], base + start))
    return segments


def split_pair(item: Segment) -> Tuple[Segment, Segment]:
    """
    Split one map item on its single unescaped '='.

    Raises:
        MalformedMapItem: If the item has zero or several unescaped '='
    """
    idxs = _delimiter_indexes(item.text, PAIR_SEP)
    if len(idxs) != 1:
        detail = "missing '='" if not idxs else "more than one '='"
        offset = item.offset + (idxs[1] if len(idxs) > 1 else 0)
        raise MalformedMapItem(item.text, offset=offset, detail=detail)
    idx = idxs[0]
    return (
        Segment(item.text[:idx], item.offset),
        Segment(item.text[idx + 1:], item.offset + idx + 1),
    )


def map_spans(field_text: str, base: int = 0) -> List[Tuple[Segment, Segment]]:
    """Split a map field into (key, value) segments. Empty text is an empty map."""
    if field_text == "":
        return []
    return [split_pair(item) for item in split_spans(field_text, ITEM_SEP, base)]


def split_record(text: str) -> List[str]:
    """Split a record into raw field substrings on unescaped ':'."""
    return [seg.text for seg in split_spans(text, FIELD_SEP)]


def split_list(field_text: str) -> List[str]:
    """Split a field into raw list items on unescaped ','."""
    return [seg.text for seg in split_spans(field_text, ITEM_SEP)]


def split_map(field_text: str) -> List[Tuple[str, str]]:
    """
    Split a field into raw (key, value) pairs.

    Raises:
        MalformedMapItem: If any item lacks exactly one unescaped '='
    """
    return [(key.text, value.text) for key, value in map_spans(field_text)]


def split_lines(text: str) -> List[str]:
    """
    Split multi-record text on unescaped LF.

    Escaped LF is a continuation and stays inside its record. One trailing LF
    terminates the last record rather than starting an empty one.
    """
    records = [seg.text for seg in split_spans(text, RECORD_SEP)]
    if len(records) > 1 and records[-1] == "":
        records.pop()
    return records


def join(items: Iterable[str], delimiter: str) -> str:
    """Concatenate already-escaped parts with a literal delimiter."""
    return delimiter.join(items)


__all__ = [
    "Segment",
    "split_spans",
    "split_pair",
    "map_spans",
    "split_record",
    "split_list",
    "split_map",
    "split_lines",
    "join",
    "FIELD_SEP",
    "ITEM_SEP",
    "PAIR_SEP",
    "RECORD_SEP",
]
