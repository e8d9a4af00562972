"""
Record layouts: Struct shapes declared in YAML.

A layout names the fields of one kind of record and gives each a type.

    name: group
    fields:
      - name: group
        type: str
      - name: password
        type: str
      - name: gid
        type: int
      - name: members
        type: list[str]

Type syntax:
    str | bool | int | float | decimal | unit
    optional[T]
    list[T]
    tuple[T, U, ...]
    map[K, V]

Enums are declared as a mapping instead of a string:

    type:
      enum: Status
      variants:
        Active: null
        Failed: str

Layouts for passwd, group, shadow and inittab ship with the package.
"""

import logging
import re
from decimal import Decimal
from importlib import resources
from typing import Any, Dict, List, Tuple

import yaml

from udsv import shapes
from udsv.codec import check_nesting
from udsv.errors import LayoutError, UDSVError


logger = logging.getLogger(__name__)

_SCALARS = {
    "str": shapes.Str,
    "bool": shapes.Bool,
    "int": lambda: shapes.Number(int),
    "float": lambda: shapes.Number(float),
    "decimal": lambda: shapes.Number(Decimal),
    "unit": shapes.Unit,
}

_TOKEN = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_]*|\[|\]|,)")


def _tokenize(type_str: str) -> List[str]:
    """Tokenize a type expression such as 'map[str, optional[int]]'."""
    tokens = []
    pos = 0
    type_str = type_str.rstrip()
    while pos < len(type_str):
        m = _TOKEN.match(type_str, pos)
        if not m:
            raise LayoutError(type_str, detail=f"unexpected character at {pos}")
        tokens.append(m.group(1))
        pos = m.end()
    if not tokens:
        raise LayoutError(type_str, detail="empty type")
    return tokens


def _parse_type(tokens: List[str], pos: int, source: str) -> Tuple[shapes.Shape, int]:
    """Parse one type starting at tokens[pos]."""
    if pos >= len(tokens):
        raise LayoutError(source, detail="unexpected end of type")

    name = tokens[pos].lower()
    pos += 1
    if name in _SCALARS:
        return _SCALARS[name](), pos

    if name not in ("optional", "list", "tuple", "map"):
        raise LayoutError(source, detail=f"unknown type {tokens[pos - 1]!r}")

    if pos >= len(tokens) or tokens[pos] != "[":
        raise LayoutError(source, detail=f"{name} needs type arguments")
    pos += 1

    args = []
    while True:
        arg, pos = _parse_type(tokens, pos, source)
        args.append(arg)
        if pos >= len(tokens):
            raise LayoutError(source, detail="missing ']'")
        if tokens[pos] == "]":
            pos += 1
            break
        if tokens[pos] != ",":
            raise LayoutError(source, detail=f"expected ',' or ']', got {tokens[pos]!r}")
        pos += 1

    if name == "tuple":
        return shapes.Tuple(*args), pos
    expected = 2 if name == "map" else 1
    if len(args) != expected:
        raise LayoutError(source, detail=f"{name} takes {expected} type argument(s)")
    if name == "optional":
        return shapes.Option(args[0]), pos
    if name == "list":
        return shapes.List(args[0]), pos
    return shapes.Map(args[0], args[1]), pos


def parse_type(spec: Any) -> shapes.Shape:
    """
    Build a Shape from a layout type declaration.

    Args:
        spec: A type string, or a mapping declaring an enum

    Raises:
        LayoutError: If the declaration is invalid
    """
    if isinstance(spec, dict):
        return _parse_enum(spec)
    if not isinstance(spec, str):
        raise LayoutError(repr(spec), detail="type must be a string or an enum mapping")

    tokens = _tokenize(spec)
    shape, pos = _parse_type(tokens, 0, spec)
    if pos != len(tokens):
        raise LayoutError(spec, detail=f"unexpected tokens after type: {tokens[pos:]}")
    return shape


def _parse_enum(spec: Dict[str, Any]) -> shapes.Enum:
    if "enum" not in spec or not isinstance(spec.get("variants"), dict):
        raise LayoutError(repr(spec), detail="enum needs 'enum' and 'variants' keys")
    variants = {
        str(name): None if payload is None else parse_type(payload)
        for name, payload in spec["variants"].items()
    }
    if not variants:
        raise LayoutError(repr(spec), detail="enum has no variants")
    return shapes.Enum(str(spec["enum"]), variants)


def layout_from_dict(d: Dict[str, Any]) -> shapes.Struct:
    """Build a Struct shape from a parsed layout definition."""
    if not isinstance(d, dict):
        raise LayoutError(repr(d), detail="layout must be a mapping")
    name = d.get("name")
    fields = d.get("fields")
    if not name or not isinstance(fields, list) or not fields:
        raise LayoutError(repr(d), detail="layout needs a name and a non-empty field list")

    seen = set()
    result = []
    for entry in fields:
        if not isinstance(entry, dict) or "name" not in entry or "type" not in entry:
            raise LayoutError(repr(entry), detail=f"field of {name} needs name and type")
        field_name = str(entry["name"])
        if field_name in seen:
            raise LayoutError(field_name, detail=f"duplicate field in {name}")
        seen.add(field_name)
        result.append(shapes.Field(field_name, parse_type(entry["type"])))

    struct = shapes.Struct(str(name), tuple(result))
    try:
        check_nesting(struct)
    except UDSVError as e:
        raise LayoutError(e.fragment, detail=f"{name}: {e.detail}") from e
    return struct


def load_layout(yaml_text: str) -> shapes.Struct:
    """Load a layout from YAML text."""
    try:
        d = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        raise LayoutError(yaml_text[:40], detail=f"invalid YAML: {e}") from e
    struct = layout_from_dict(d)
    logger.info("Loaded layout %s with %d fields", struct.name, len(struct.fields))
    return struct


def load_layout_file(filepath: str) -> shapes.Struct:
    """
    Load a layout from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        LayoutError: If the layout is invalid
    """
    with open(filepath, "r", encoding="utf-8") as f:
        content = f.read()
    return load_layout(content)


def available_layouts() -> List[str]:
    """Names of the layouts bundled with the package."""
    data = resources.files("udsv") / "data"
    return sorted(
        entry.name[: -len(".yaml")]
        for entry in data.iterdir()
        if entry.name.endswith(".yaml")
    )


def builtin_layout(name: str) -> shapes.Struct:
    """
    Load one of the bundled layouts (passwd, group, shadow, inittab).

    Raises:
        LayoutError: If no layout has that name
    """
    if name not in available_layouts():
        raise LayoutError(name, detail=f"no built-in layout; choose from {available_layouts()}")
    text = (resources.files("udsv") / "data" / f"{name}.yaml").read_text(encoding="utf-8")
    return load_layout(text)


__all__ = [
    "parse_type",
    "layout_from_dict",
    "load_layout",
    "load_layout_file",
    "available_layouts",
    "builtin_layout",
]
