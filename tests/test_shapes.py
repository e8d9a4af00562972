"""
Tests for shape descriptors and shape_for().
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pytest

from udsv import shapes
from udsv.shapes import shape_for


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Account:
    user: str
    uid: int
    groups: List[str]
    shell: Optional[str] = None
    cache: Dict[str, str] = field(default_factory=dict, init=False)


class TestShapeFor:
    """Python type hints map onto shapes."""

    def test_scalars(self):
        assert shape_for(str) == shapes.Str()
        assert shape_for(bool) == shapes.Bool()
        assert shape_for(int) == shapes.Number(int)
        assert shape_for(Decimal) == shapes.Number(Decimal)
        assert shape_for(None) == shapes.Unit()

    def test_shapes_pass_through(self):
        s = shapes.List(shapes.Number(float))
        assert shape_for(s) is s

    def test_shape_class_instantiated(self):
        assert shape_for(shapes.Str) == shapes.Str()

    def test_containers(self):
        assert shape_for(Optional[str]) == shapes.Option(shapes.Str())
        assert shape_for(List[int]) == shapes.List(shapes.Number(int))
        assert shape_for(Dict[str, bool]) == shapes.Map(shapes.Str(), shapes.Bool())
        assert shape_for(Tuple[str, int]) == shapes.Tuple(shapes.Str(), shapes.Number(int))

    def test_dataclass_becomes_struct(self):
        s = shape_for(Account)
        assert isinstance(s, shapes.Struct)
        assert s.field_names == ["user", "uid", "groups", "shell"]
        assert s.factory is Account

    def test_python_enum(self):
        s = shape_for(Color)
        assert isinstance(s, shapes.Enum)
        assert s.variants == {"RED": None, "GREEN": None}
        assert s.members is Color

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            shape_for(set)
        with pytest.raises(TypeError):
            shape_for(bytes)

    def test_variable_tuple_rejected(self):
        with pytest.raises(TypeError):
            shape_for(Tuple[int, ...])

    def test_non_optional_union_rejected(self):
        from typing import Union

        with pytest.raises(TypeError):
            shape_for(Union[int, str])


class TestDescribe:
    """Shapes describe themselves for error messages."""

    def test_nested_description(self):
        s = shapes.Map(shapes.Str(), shapes.Option(shapes.Number(int)))
        assert s.describe() == "map[str, optional[int]]"

    def test_tuple_arity(self):
        t = shapes.Tuple(shapes.Str(), shapes.Bool())
        assert t.arity == 2
        assert str(t) == "tuple[str, bool]"
