"""
UDSV: UNIX Delimiter Separated Values codec

Reads and writes the colon-delimited, backslash-escaped records of files such
as passwd, shadow, group and inittab.

ARCHITECTURAL GUARANTEE:
------------------------
The format is NOT self-describing.

Every decode is driven by the caller's Shape (or type hint):
    - the same text may be a string, a list or a map
    - nothing is inferred from the text itself

Layers, leaf first:
    escaping  raw text <-> escaped text, per grammar position
    grammar   split/join on unescaped ':' ',' '='
    codec     Shapes <-> grammar parts
    layouts   Struct shapes declared in YAML
"""

from udsv.codec import (
    CodecOptions,
    record_to_text,
    record_from_text,
    records_to_text,
    records_from_text,
    iter_records,
)
from udsv.errors import (
    UDSVError,
    InvalidEscape,
    MalformedMapItem,
    InvalidBoolean,
    InvalidNumber,
    UnknownVariant,
    ArityMismatch,
    UnsupportedNesting,
    UnexpectedTrailingData,
    DuplicateKey,
    LayoutError,
)
from udsv.escaping import Position, escape, unescape
from udsv.grammar import split_record, split_list, split_map, join
from udsv.layouts import available_layouts, builtin_layout, load_layout, load_layout_file
from udsv.shapes import (
    Shape,
    Str,
    Bool,
    Number,
    Unit,
    Option,
    List,
    Tuple,
    Map,
    Field,
    Struct,
    Enum,
    Variant,
    shape_for,
)

__version__ = "0.1.0"

__all__ = [
    "CodecOptions",
    "record_to_text",
    "record_from_text",
    "records_to_text",
    "records_from_text",
    "iter_records",
    "UDSVError",
    "InvalidEscape",
    "MalformedMapItem",
    "InvalidBoolean",
    "InvalidNumber",
    "UnknownVariant",
    "ArityMismatch",
    "UnsupportedNesting",
    "UnexpectedTrailingData",
    "DuplicateKey",
    "LayoutError",
    "Position",
    "escape",
    "unescape",
    "split_record",
    "split_list",
    "split_map",
    "join",
    "available_layouts",
    "builtin_layout",
    "load_layout",
    "load_layout_file",
    "Shape",
    "Str",
    "Bool",
    "Number",
    "Unit",
    "Option",
    "List",
    "Tuple",
    "Map",
    "Field",
    "Struct",
    "Enum",
    "Variant",
    "shape_for",
]
