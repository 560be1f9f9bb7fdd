"""Type introspection helpers: Optional/Annotated unwrapping, kinds and zero values."""

import dataclasses
import inspect
import types
import typing
from typing import Annotated, Any, Optional, get_args, get_origin, get_type_hints

BOOL = "bool"
INT = "int"
UINT = "uint"
FLOAT = "float"
STRING = "string"
BYTES = "bytes"
MAP = "map"
SLICE = "slice"
STRUCT = "struct"

SCALAR_KINDS = (BOOL, INT, UINT, FLOAT, STRING)

_UNION_TYPES = (typing.Union, types.UnionType)


class uint(int):
    """Unsigned integer field type; negative values are rejected on bind."""

    def __new__(cls, value: int = 0):
        if value < 0:
            raise ValueError(f"{value} is negative")
        return super().__new__(cls, value)


def unwrap(hint: Any) -> tuple[Any, list[Any], bool]:
    """
    Strip Annotated and Optional wrappers from a type hint.

    Returns (inner type, Annotated extras, optional flag).
    """
    extras: list[Any] = []
    optional = False
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            args = get_args(hint)
            extras.extend(args[1:])
            hint = args[0]
            continue
        if origin in _UNION_TYPES:
            args = [a for a in get_args(hint) if a is not type(None)]
            if len(args) == 1 and len(get_args(hint)) == 2:
                optional = True
                hint = args[0]
                continue
        return hint, extras, optional


def type_name(tp: Any) -> str:
    """Registry key for a type, e.g. `datetime.timedelta`."""
    if isinstance(tp, str):
        return tp
    module = getattr(tp, "__module__", None)
    qualname = getattr(tp, "__qualname__", None)
    if module and qualname:
        return qualname if module == "builtins" else f"{module}.{qualname}"
    return str(tp)


def is_struct(tp: Any) -> bool:
    return inspect.isclass(tp) and dataclasses.is_dataclass(tp)


def slice_element(tp: Any) -> Any:
    args = get_args(tp)
    return args[0] if args else str


def kind_of(tp: Any) -> Optional[str]:
    """Structural kind of a type, or None when no built-in setter applies."""
    if inspect.isclass(tp):
        if issubclass(tp, bool):
            return BOOL
        if issubclass(tp, uint):
            return UINT
        if issubclass(tp, int):
            return INT
        if issubclass(tp, float):
            return FLOAT
        if issubclass(tp, str):
            return STRING
        if issubclass(tp, (bytes, bytearray)):
            return BYTES
        if is_struct(tp):
            return STRUCT
        if tp is dict:
            return MAP
        if tp is list:
            return SLICE
        return None

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is dict:
        if not args or args == (str, str):
            return MAP
        return None
    if origin is list:
        if kind_of(slice_element(tp)) in SCALAR_KINDS:
            return SLICE
        return None
    return None


def zero_value(tp: Any) -> Any:
    """Zero value of a type: what a freshly allocated field holds before binding."""
    tp, _, optional = unwrap(tp)
    if optional:
        return None
    if is_struct(tp):
        return zero_instance(tp)

    kind = kind_of(tp)
    if kind == MAP:
        return {}
    if kind == SLICE:
        return []
    if kind == BYTES:
        return tp() if inspect.isclass(tp) else b""
    if inspect.isclass(tp):
        try:
            return tp()
        except (TypeError, ValueError):
            return None
    return None


def zero_instance(cls: type) -> Any:
    """Instantiate a dataclass, filling fields that have no default with zero values."""
    hints = get_type_hints(cls, include_extras=True)
    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        kwargs[f.name] = zero_value(hints.get(f.name, f.type))
    return cls(**kwargs)
