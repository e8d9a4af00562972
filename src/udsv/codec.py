"""
Type-directed serializer/deserializer for UDSV records.

Public entry points:
    record_to_text(value, shape)      -> str
    record_from_text(text, shape)     -> value
    records_to_text(values, shape)    -> str   (LF-delimited)
    records_from_text(text, shape)    -> list
    iter_records(text, shape)         -> generator

`shape` is either a Shape from `udsv.shapes` or a Python type hint that
`shape_for` understands (dataclass, List[str], Optional[int], ...).

Nesting levels:
    record  Struct
    field   List, Tuple, Map, Enum, scalars
    item    scalars only (list items, map keys/values, enum payloads)

Anything placed deeper than its level raises UnsupportedNesting.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional

from udsv import shapes
from udsv.errors import (
    UDSVError,
    InvalidEscape,
    InvalidBoolean,
    InvalidNumber,
    UnknownVariant,
    ArityMismatch,
    UnsupportedNesting,
    UnexpectedTrailingData,
    DuplicateKey,
)
from udsv.escaping import Position, escape, unescape
from udsv.grammar import (
    Segment,
    FIELD_SEP,
    ITEM_SEP,
    PAIR_SEP,
    RECORD_SEP,
    split_spans,
    split_pair,
    map_spans,
    split_lines,
    join,
)


logger = logging.getLogger(__name__)

DUPLICATE_KEY_POLICIES = ("reject", "first", "last")

_RECORD, _FIELD, _ITEM = 0, 1, 2
_LEVEL_NAMES = {_RECORD: "record", _FIELD: "field", _ITEM: "item"}


@dataclass(frozen=True)
class CodecOptions:
    """
    Codec configuration.

    Properties:
        duplicate_keys:
            What to do when a decoded map repeats a key.
            "reject" raises DuplicateKey, "first" keeps the first value,
            "last" keeps the last one.
        strict_fields:
            If False, a record with fewer fields than its Struct is accepted
            when every missing trailing field is optional; those fields
            decode to None.
    """

    duplicate_keys: str = "reject"
    strict_fields: bool = True

    def __post_init__(self):
        if self.duplicate_keys not in DUPLICATE_KEY_POLICIES:
            raise ValueError(
                f"duplicate_keys must be one of {DUPLICATE_KEY_POLICIES}, "
                f"got {self.duplicate_keys!r}"
            )


DEFAULT_OPTIONS = CodecOptions()


# ---------------------------------------------------------------------------
# Nesting validation
# ---------------------------------------------------------------------------


def check_nesting(shape: shapes.Shape, level: int = _RECORD) -> None:
    """
    Verify that `shape` respects the one-level composition rule.

    Raises:
        UnsupportedNesting: If a composite sits inside another composite
    """
    if isinstance(shape, shapes.Option):
        if isinstance(shape.inner, shapes.Struct):
            _nested(shape, level)
        check_nesting(shape.inner, level)
    elif isinstance(shape, shapes.Struct):
        if level != _RECORD:
            _nested(shape, level)
        for f in shape.fields:
            check_nesting(f.shape, _FIELD)
    elif isinstance(shape, shapes.List):
        if level == _ITEM:
            _nested(shape, level)
        check_nesting(shape.item, _ITEM)
    elif isinstance(shape, shapes.Tuple):
        if level == _ITEM:
            _nested(shape, level)
        for s in shape.items:
            check_nesting(s, _ITEM)
    elif isinstance(shape, shapes.Map):
        if level == _ITEM:
            _nested(shape, level)
        check_nesting(shape.key, _ITEM)
        check_nesting(shape.value, _ITEM)
    elif isinstance(shape, shapes.Enum):
        if level == _ITEM:
            _nested(shape, level)
        for payload in shape.variants.values():
            if payload is not None:
                check_nesting(payload, _ITEM)
    elif not isinstance(shape, (shapes.Str, shapes.Bool, shapes.Number, shapes.Unit)):
        raise TypeError(f"Unsupported shape: {shape!r}")


def _nested(shape: shapes.Shape, level: int):
    raise UnsupportedNesting(
        shape.describe(), detail=f"not allowed at {_LEVEL_NAMES[level]} level"
    )


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def record_to_text(value: Any, shape: Any, options: Optional[CodecOptions] = None) -> str:
    """
    Encode one value as a single UDSV record.

    Args:
        value: The value to encode
        shape: Shape or type hint describing `value`
        options: Codec configuration (unused when encoding; accepted for symmetry)

    Returns:
        Record text without a trailing newline
    """
    shape = shapes.shape_for(shape)
    check_nesting(shape)
    logger.debug("Encoding %s", shape.describe())

    if isinstance(shape, shapes.Struct):
        return join(
            (_encode_field(_struct_get(value, shape, f.name), f.shape) for f in shape.fields),
            FIELD_SEP,
        )
    return _encode_field(value, shape)


def _struct_get(value: Any, shape: shapes.Struct, name: str) -> Any:
    try:
        if isinstance(value, Mapping):
            return value[name]
        return getattr(value, name)
    except (KeyError, AttributeError):
        raise TypeError(f"{shape.name} value has no field {name!r}: {value!r}") from None


def _iter_items(value: Any, shape: shapes.Shape) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(
            f"Expected a sequence for {shape.describe()}, got {type(value).__name__}: {value!r}"
        )
    return list(value)


def _encode_field(value: Any, shape: shapes.Shape) -> str:
    if isinstance(shape, shapes.Option):
        return "" if value is None else _encode_field(value, shape.inner)
    if isinstance(shape, shapes.List):
        items = _iter_items(value, shape)
        return join((_encode_scalar(v, shape.item, Position.LIST_ITEM) for v in items), ITEM_SEP)
    if isinstance(shape, shapes.Tuple):
        items = _iter_items(value, shape)
        if len(items) != shape.arity:
            raise ArityMismatch(
                repr(value), detail=f"expected {shape.arity} items, got {len(items)}"
            )
        return join(
            (_encode_scalar(v, s, Position.LIST_ITEM) for v, s in zip(items, shape.items)),
            ITEM_SEP,
        )
    if isinstance(shape, shapes.Map):
        if not isinstance(value, Mapping):
            raise TypeError(
                f"Expected a mapping for {shape.describe()}, got {type(value).__name__}: {value!r}"
            )
        return join(
            (
                _encode_scalar(k, shape.key, Position.MAP_KEY)
                + PAIR_SEP
                + _encode_scalar(v, shape.value, Position.MAP_VALUE)
                for k, v in value.items()
            ),
            ITEM_SEP,
        )
    if isinstance(shape, shapes.Enum):
        return _encode_variant(value, shape)
    return _encode_scalar(value, shape, Position.PLAIN)


def _encode_scalar(value: Any, shape: shapes.Shape, position: Position) -> str:
    if isinstance(shape, shapes.Option):
        return "" if value is None else _encode_scalar(value, shape.inner, position)
    if isinstance(shape, shapes.Str):
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}: {value!r}")
        return escape(value, position)
    if isinstance(shape, shapes.Bool):
        if not isinstance(value, bool):
            raise InvalidBoolean(repr(value), detail="expected a bool")
        return "true" if value else "false"
    if isinstance(shape, shapes.Number):
        if shape.format is None and isinstance(shape.kind, type):
            if isinstance(value, bool) or not isinstance(value, shape.kind):
                raise InvalidNumber(repr(value), detail=f"expected {shape.describe()}")
        fmt = shape.format or str
        try:
            text = fmt(value)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise InvalidNumber(repr(value), detail=str(e)) from e
        return escape(text, position)
    if isinstance(shape, shapes.Unit):
        if value is not None:
            raise UnexpectedTrailingData(repr(value), detail="unit takes no value")
        return ""
    # check_nesting rejects composites at item level before we get here
    raise UnsupportedNesting(shape.describe())


def _encode_variant(value: Any, shape: shapes.Enum) -> str:
    if isinstance(value, shapes.Variant):
        name, payload = value.name, value.payload
    elif shape.members is not None and isinstance(value, shape.members):
        name, payload = value.name, None
    elif isinstance(value, str):
        name, payload = value, None
    else:
        raise UnknownVariant(repr(value), detail=f"not a variant of {shape.name}")

    if name not in shape.variants:
        raise UnknownVariant(name, detail=f"not a variant of {shape.name}")

    tag = escape(name, Position.MAP_KEY)
    payload_shape = shape.variants[name]
    if payload_shape is None:
        if payload is not None:
            raise UnexpectedTrailingData(repr(payload), detail=f"{name} is a unit variant")
        return tag
    return tag + PAIR_SEP + _encode_scalar(payload, payload_shape, Position.MAP_VALUE)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def record_from_text(text: str, shape: Any, options: Optional[CodecOptions] = None) -> Any:
    """
    Decode a single UDSV record.

    Args:
        text: Record text (no record-separating LF)
        shape: Shape or type hint to decode into
        options: Codec configuration

    Returns:
        The decoded value

    Raises:
        UDSVError: Any codec error; nothing is returned on failure
    """
    shape = shapes.shape_for(shape)
    options = options or DEFAULT_OPTIONS
    check_nesting(shape)
    logger.debug("Decoding %s", shape.describe())

    segments = split_spans(text, FIELD_SEP)
    if isinstance(shape, shapes.Struct):
        return _decode_struct(segments, shape, options)

    if len(segments) > 1:
        start = segments[1].offset - 1
        raise UnexpectedTrailingData(
            text[start:], offset=start, detail="expected a single field"
        )
    return _decode_field(segments[0], shape, options)


def _decode_struct(segments: List[Segment], shape: shapes.Struct, options: CodecOptions) -> Any:
    expected = len(shape.fields)
    if expected == 0 and segments == [Segment("", 0)]:
        segments = []
    if len(segments) > expected:
        start = max(segments[expected].offset - 1, 0)
        raise UnexpectedTrailingData(
            segments[expected].text,
            offset=start,
            detail=f"{shape.name} has {expected} fields, record has {len(segments)}",
        )

    values = {}
    for i, f in enumerate(shape.fields):
        if i < len(segments):
            values[f.name] = _decode_field(segments[i], f.shape, options)
        elif not options.strict_fields and isinstance(f.shape, shapes.Option):
            logger.debug("Missing optional field %s.%s decoded as None", shape.name, f.name)
            values[f.name] = None
        else:
            last = segments[-1]
            raise ArityMismatch(
                last.text,
                offset=last.offset + len(last.text),
                detail=f"{shape.name} has {expected} fields, record has {len(segments)}",
            )

    if shape.factory is None:
        return values
    return shape.factory(**values)


def _decode_field(seg: Segment, shape: shapes.Shape, options: CodecOptions) -> Any:
    if isinstance(shape, shapes.Option):
        return None if seg.text == "" else _decode_field(seg, shape.inner, options)
    if isinstance(shape, shapes.List):
        if seg.text == "":
            return []
        return [_decode_scalar(item, shape.item) for item in split_spans(seg.text, ITEM_SEP, seg.offset)]
    if isinstance(shape, shapes.Tuple):
        return _decode_tuple(seg, shape)
    if isinstance(shape, shapes.Map):
        return _decode_map(seg, shape, options)
    if isinstance(shape, shapes.Enum):
        return _decode_variant(seg, shape)
    return _decode_scalar(seg, shape)


def _decode_tuple(seg: Segment, shape: shapes.Tuple) -> tuple:
    items = [] if seg.text == "" and shape.arity == 0 else split_spans(seg.text, ITEM_SEP, seg.offset)
    if len(items) != shape.arity:
        raise ArityMismatch(
            seg.text,
            offset=seg.offset,
            detail=f"expected {shape.arity} items, got {len(items)}",
        )
    return tuple(_decode_scalar(item, s) for item, s in zip(items, shape.items))


def _decode_map(seg: Segment, shape: shapes.Map, options: CodecOptions) -> dict:
    result = {}
    for key_seg, value_seg in map_spans(seg.text, seg.offset):
        key = _decode_scalar(key_seg, shape.key)
        value = _decode_scalar(value_seg, shape.value)
        if key in result:
            if options.duplicate_keys == "reject":
                raise DuplicateKey(key_seg.text, offset=key_seg.offset)
            if options.duplicate_keys == "first":
                logger.debug("Duplicate map key %r: keeping first value", key)
                continue
            logger.debug("Duplicate map key %r: keeping last value", key)
        result[key] = value
    return result


def _decode_variant(seg: Segment, shape: shapes.Enum) -> Any:
    items = split_spans(seg.text, ITEM_SEP, seg.offset)
    if len(items) > 1:
        start = items[1].offset - 1
        raise UnexpectedTrailingData(
            seg.text[start - seg.offset:], offset=start, detail="enum field holds one variant"
        )

    if PAIR_SEP not in seg.text or not _has_unescaped(seg, PAIR_SEP):
        name = _unescape(seg)
        if name not in shape.variants or shape.variants[name] is not None:
            raise UnknownVariant(
                name, offset=seg.offset, detail=f"no unit variant of {shape.name}"
            )
        return _variant_value(shape, name, None)

    tag_seg, payload_seg = split_pair(seg)
    name = _unescape(tag_seg)
    if name not in shape.variants:
        raise UnknownVariant(name, offset=tag_seg.offset, detail=f"not a variant of {shape.name}")
    payload_shape = shape.variants[name]
    if payload_shape is None:
        raise UnexpectedTrailingData(
            payload_seg.text,
            offset=payload_seg.offset,
            detail=f"{name} is a unit variant",
        )
    return _variant_value(shape, name, _decode_scalar(payload_seg, payload_shape))


def _has_unescaped(seg: Segment, delimiter: str) -> bool:
    return len(split_spans(seg.text, delimiter)) > 1


def _variant_value(shape: shapes.Enum, name: str, payload: Any) -> Any:
    if shape.members is not None:
        return shape.members[name]
    return shapes.Variant(name, payload)


def _decode_scalar(seg: Segment, shape: shapes.Shape) -> Any:
    if isinstance(shape, shapes.Option):
        return None if seg.text == "" else _decode_scalar(seg, shape.inner)
    if isinstance(shape, shapes.Unit):
        if seg.text != "":
            raise UnexpectedTrailingData(seg.text, offset=seg.offset, detail="unit takes no value")
        return None

    text = _unescape(seg)
    if isinstance(shape, shapes.Str):
        return text
    if isinstance(shape, shapes.Bool):
        if text == "true":
            return True
        if text == "false":
            return False
        raise InvalidBoolean(seg.text, offset=seg.offset)
    if isinstance(shape, shapes.Number):
        try:
            return shape.kind(text)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise InvalidNumber(seg.text, offset=seg.offset, detail=str(e)) from e
    raise UnsupportedNesting(shape.describe())


def _unescape(seg: Segment) -> str:
    try:
        return unescape(seg.text)
    except InvalidEscape as e:
        e.shifted(seg.offset)
        raise


# ---------------------------------------------------------------------------
# Multi-record text
# ---------------------------------------------------------------------------


def iter_records(text: str, shape: Any, options: Optional[CodecOptions] = None) -> Iterator[Any]:
    """
    Decode LF-delimited records one at a time.

    Errors carry the 1-based record number in `line`.
    """
    if text == "":
        return
    shape = shapes.shape_for(shape)
    for lineno, record in enumerate(split_lines(text), start=1):
        try:
            yield record_from_text(record, shape, options)
        except UDSVError as e:
            e.at_line(lineno)
            raise


def records_from_text(text: str, shape: Any, options: Optional[CodecOptions] = None) -> List[Any]:
    """Decode every LF-delimited record in `text`."""
    return list(iter_records(text, shape, options))


def records_to_text(values: Iterable[Any], shape: Any, options: Optional[CodecOptions] = None) -> str:
    """Encode values as LF-terminated records."""
    shape = shapes.shape_for(shape)
    return "".join(record_to_text(v, shape, options) + RECORD_SEP for v in values)


__all__ = [
    "CodecOptions",
    "DEFAULT_OPTIONS",
    "check_nesting",
    "record_to_text",
    "record_from_text",
    "iter_records",
    "records_from_text",
    "records_to_text",
]
