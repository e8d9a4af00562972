"""
Shape descriptors for the type-directed UDSV codec.

UDSV is not self-describing: the text `a,b` is a string, a two-item list or a
two-item tuple depending only on what the caller asks for. A Shape is that
request. Decoding and encoding are always driven by a Shape, never by
inspecting the text.

Shapes form a small tree:

    Struct            a whole record, one Field per colon-separated part
    List, Tuple, Map  one field holding comma-separated items
    Enum              one field holding `Name` or `Name=payload`
    Str, Bool,        scalars, valid anywhere
    Number, Unit
    Option            wraps any shape, at that shape's own level

Shapes are plain immutable data. The rules for what may nest inside what are
enforced by `udsv.codec`, not here.
"""

import dataclasses
import enum
import types
import typing
from abc import ABC
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Dict, Optional


class Shape(ABC):
    """
    Base class for all shape descriptors.

    Structure only. Encoding and decoding rules live in the codec.
    """

    def describe(self) -> str:
        return type(self).__name__.lower()

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class Str(Shape):
    """A plain string scalar."""

    def describe(self) -> str:
        return "str"


@dataclass(frozen=True)
class Bool(Shape):
    """A boolean scalar, written as `true` / `false`."""

    def describe(self) -> str:
        return "bool"


@dataclass(frozen=True)
class Number(Shape):
    """
    A numeric scalar.

    The format defines no number syntax. Parsing is delegated to `kind`
    (called with the unescaped text) and formatting to `format` (defaults to
    `str`).

    Properties:
        kind: Numeric type or parser, e.g. int, float, Decimal
        format: Optional formatter; receives the value, returns text
    """

    kind: Callable[[str], Any] = int
    format: Optional[Callable[[Any], str]] = None

    def describe(self) -> str:
        return getattr(self.kind, "__name__", "number")


@dataclass(frozen=True)
class Unit(Shape):
    """The empty value. Encodes as an empty scalar and decodes to None."""

    def describe(self) -> str:
        return "unit"


@dataclass(frozen=True)
class Option(Shape):
    """
    An optional value.

    Absent encodes as the empty scalar; present values encode untagged.
    Empty text always decodes to None, so Option(Str()) cannot carry "".
    """

    inner: Shape

    def describe(self) -> str:
        return f"optional[{self.inner.describe()}]"


@dataclass(frozen=True)
class List(Shape):
    """A comma-separated list of scalar items."""

    item: Shape = field(default_factory=Str)

    def describe(self) -> str:
        return f"list[{self.item.describe()}]"


@dataclass(frozen=True)
class Tuple(Shape):
    """
    A fixed-arity list.

    Arity is not written to the text; decoding checks it against `items`.
    """

    items: typing.Tuple[Shape, ...] = ()

    def __init__(self, *items: Shape):
        object.__setattr__(self, "items", tuple(items))

    @property
    def arity(self) -> int:
        return len(self.items)

    def describe(self) -> str:
        return "tuple[" + ", ".join(s.describe() for s in self.items) + "]"


@dataclass(frozen=True)
class Map(Shape):
    """A comma-separated list of `key=value` items."""

    key: Shape = field(default_factory=Str)
    value: Shape = field(default_factory=Str)

    def describe(self) -> str:
        return f"map[{self.key.describe()}, {self.value.describe()}]"


@dataclass(frozen=True)
class Field:
    """One named field of a Struct. Names are never written to the text."""

    name: str
    shape: Shape


@dataclass(frozen=True)
class Struct(Shape):
    """
    A whole record: one field per colon-separated part, in declaration order.

    Properties:
        name: Struct name (diagnostics only)
        fields: Ordered Field descriptors
        factory: Called with the decoded fields as keyword arguments.
            If None, decoding yields a dict.
    """

    name: str
    fields: typing.Tuple[Field, ...]
    factory: Optional[Callable[..., Any]] = None

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def field_names(self) -> typing.List[str]:
        return [f.name for f in self.fields]

    def describe(self) -> str:
        return f"struct {self.name}"


@dataclass(frozen=True)
class Variant:
    """
    A decoded (or to-be-encoded) enum value.

    Properties:
        name: Variant name, written as the tag
        payload: Data carried by the variant; None for unit variants
    """

    name: str
    payload: Any = None


@dataclass(frozen=True)
class Enum(Shape):
    """
    An externally tagged enum.

    Unit variants are written as the bare name; data variants as
    `name=payload`. Payloads must be scalar shapes; list, tuple, map or
    struct payloads are rejected with UnsupportedNesting.

    Properties:
        name: Enum name (diagnostics only)
        variants: Variant name -> payload shape, or None for unit variants
        members: Optional `enum.Enum` class. When set, values are its
            members, matched by member name.
    """

    name: str
    variants: Dict[str, Optional[Shape]]
    members: Optional[type] = None

    def describe(self) -> str:
        return f"enum {self.name}"


_NUMBER_TYPES = (int, float, Decimal, Fraction)


def shape_for(tp: Any) -> Shape:
    """
    Build a Shape from a Python type hint.

    Shapes are returned unchanged, so callers may pass either.

    Supported:
        str, bool, int, float, Decimal, Fraction, None,
        Optional[X], List[X], Tuple[X, ...] (fixed arity), Dict[K, V],
        dataclasses (-> Struct), enum.Enum subclasses (-> unit-only Enum)

    Raises:
        TypeError: For hints with no UDSV representation
    """
    if isinstance(tp, Shape):
        return tp
    if isinstance(tp, type) and issubclass(tp, Shape):
        return tp()
    if tp is None or tp is type(None):
        return Unit()
    if tp is str:
        return Str()
    # bool before int: bool is an int subclass
    if tp is bool:
        return Bool()
    if isinstance(tp, type) and issubclass(tp, _NUMBER_TYPES):
        return Number(tp)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return Enum(tp.__name__, {name: None for name in tp.__members__}, members=tp)
    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        return _struct_for(tp)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        rest = [a for a in args if a is not type(None)]
        if len(rest) != 1 or len(args) != 2:
            raise TypeError(f"Only Optional[X] unions are supported: {tp!r}")
        return Option(shape_for(rest[0]))
    if tp is list or origin is list:
        return List(shape_for(args[0]) if args else Str())
    if tp is dict or origin is dict:
        if args:
            return Map(shape_for(args[0]), shape_for(args[1]))
        return Map()
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            raise TypeError(f"Variable-length tuples have no arity; use List: {tp!r}")
        if args == ((),):
            return Tuple()
        return Tuple(*(shape_for(a) for a in args))

    raise TypeError(f"Unsupported type for UDSV: {tp!r}")


def _struct_for(cls: type) -> Struct:
    hints = typing.get_type_hints(cls)
    fields = tuple(
        Field(f.name, shape_for(hints[f.name]))
        for f in dataclasses.fields(cls)
        if f.init
    )
    return Struct(cls.__name__, fields, factory=cls)


__all__ = [
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
