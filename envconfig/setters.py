"""
Setter registry and built-in setters.

A setter takes a handle to a field and the raw string from the environment and
stores the converted value through the handle, raising ConversionError when the
string cannot be converted.
"""

import base64
import binascii
import csv
import re
from datetime import timedelta
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from envconfig import kinds
from envconfig.errors import ConversionError
from envconfig.tags import Tag


class FieldRef:
    """Handle to one attribute of a caller-owned object."""

    def __init__(self, owner: Any, name: str, type_: Any):
        self.owner = owner
        self.name = name
        self.type = type_

    def get(self) -> Any:
        return getattr(self.owner, self.name, None)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.name, value)

    def __repr__(self) -> str:
        return f"FieldRef({type(self.owner).__name__}.{self.name})"


class Cell:
    """Detached handle holding a value until it is assigned to a field."""

    def __init__(self, type_: Any, value: Any = None):
        self.type = type_
        self.value = value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value


Setter = Callable[[Any, str], None]


@runtime_checkable
class TextUnmarshaler(Protocol):
    def unmarshal_text(self, text: bytes) -> None: ...


@runtime_checkable
class JSONUnmarshaler(Protocol):
    def unmarshal_json(self, data: bytes) -> None: ...


# --- capability setters ---

def has_capability(tp: Any) -> bool:
    """True if tp decodes itself from text or JSON."""
    if not isinstance(tp, type):
        return False
    return issubclass(tp, TextUnmarshaler) or issubclass(tp, JSONUnmarshaler) or issubclass(tp, BaseModel)


def _instance_for(ref: Any) -> Any:
    current = ref.get()
    if isinstance(current, ref.type):
        return current
    return ref.type()


def unmarshal_text_setter(ref: Any, raw: str) -> None:
    target = _instance_for(ref)
    target.unmarshal_text(raw.encode())
    ref.set(target)


def unmarshal_json_setter(ref: Any, raw: str) -> None:
    if raw:
        target = _instance_for(ref)
        target.unmarshal_json(raw.encode())
        ref.set(target)


def model_json_setter(ref: Any, raw: str) -> None:
    if raw:
        ref.set(ref.type.model_validate_json(raw))


# --- kind setters ---

def bool_setter(ref: Any, raw: str) -> None:
    ref.set(raw.lower() == "true")


_OCTAL = re.compile(r"^[+-]?0[0-7]+$")


def _parse_int(raw: str) -> int:
    if not raw:
        return 0
    try:
        if _OCTAL.match(raw):
            return int(raw, 8)
        return int(raw, 0)
    except ValueError:
        raise ConversionError(f"could not parse '{raw}' as integer") from None


def int_setter(ref: Any, raw: str) -> None:
    value = _parse_int(raw)
    ref.set(value if ref.type is int else ref.type(value))


def uint_setter(ref: Any, raw: str) -> None:
    value = _parse_int(raw)
    if value < 0:
        raise ConversionError(f"could not parse '{raw}' as unsigned integer")
    ref.set(ref.type(value))


def float_setter(ref: Any, raw: str) -> None:
    try:
        value = float(raw) if raw else 0.0
    except ValueError:
        raise ConversionError(f"could not parse '{raw}' as float") from None
    ref.set(value if ref.type is float else ref.type(value))


def string_setter(ref: Any, raw: str) -> None:
    ref.set(raw if ref.type is str else ref.type(raw))


def _set_bytes(ref: Any, value: bytes) -> None:
    ref.set(value if ref.type is bytes else ref.type(value))


def hex_bytes_setter(ref: Any, raw: str) -> None:
    if raw:
        try:
            _set_bytes(ref, binascii.unhexlify(raw))
        except (binascii.Error, ValueError) as e:
            raise ConversionError(f"could not decode '{raw}' as hex: {e}") from e


def base64_bytes_setter(ref: Any, raw: str) -> None:
    if raw:
        try:
            _set_bytes(ref, base64.b64decode(raw, validate=True))
        except (binascii.Error, ValueError) as e:
            raise ConversionError(f"could not decode '{raw}' as base64: {e}") from e


def _strip_brackets(raw: str) -> str:
    if raw.startswith("["):
        raw = raw[1:]
    if raw.endswith("]"):
        raw = raw[:-1]
    return raw


def _read_record(raw: str) -> list[str]:
    """Parse one CSV record, honoring standard quoting."""
    try:
        reader = csv.reader([raw], strict=True)
        return next(reader, [])
    except csv.Error as e:
        raise ConversionError(f"could not parse '{raw}' as a list: {e}") from e


def map_setter(ref: Any, raw: str) -> None:
    result: dict[str, str] = {}
    if raw:
        for pair in _read_record(_strip_brackets(raw)):
            k, sep, v = pair.partition("=")
            if not sep:
                raise ConversionError(f"{pair} must be formatted as key=value")
            result[k] = v
    ref.set(result)


_ELEMENT_SETTERS: dict[str, Setter] = {}


def slice_setter(ref: Any, raw: str) -> None:
    raw = _strip_brackets(raw)
    if not raw:
        return

    element = kinds.slice_element(ref.type)
    setter = _ELEMENT_SETTERS[kinds.kind_of(element)]
    values = []
    for item in _read_record(raw):
        cell = Cell(element)
        setter(cell, item)
        values.append(cell.get())
    ref.set(values)


_ELEMENT_SETTERS.update({
    kinds.BOOL: bool_setter,
    kinds.INT: int_setter,
    kinds.UINT: uint_setter,
    kinds.FLOAT: float_setter,
    kinds.STRING: string_setter,
})

KIND_SETTERS: dict[str, Setter] = {
    **_ELEMENT_SETTERS,
    kinds.MAP: map_setter,
    kinds.SLICE: slice_setter,
}


# --- durations ---

_DURATION_UNITS = {
    "ns": 1e-3,
    "us": 1.0,
    "µs": 1.0,
    "ms": 1e3,
    "s": 1e6,
    "m": 60e6,
    "h": 3600e6,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(raw: str) -> timedelta:
    """
    Parse a duration such as `300ms`, `1m`, `12345s` or `-1h30m`.

    A bare `0` is accepted; every other number needs a unit.
    """
    s = raw.strip()
    sign = 1
    if s and s[0] in "+-":
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ConversionError(f"invalid duration '{raw}'")

    micros = 0.0
    pos = 0
    for m in _DURATION_PART.finditer(s):
        if m.start() != pos:
            break
        micros += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    if pos != len(s):
        raise ConversionError(f"invalid duration '{raw}'")
    return timedelta(microseconds=sign * micros)


def duration_setter(ref: Any, raw: str) -> None:
    if raw:
        ref.set(parse_duration(raw))


# --- pointer wrapping ---

def optional_setter(inner: Setter) -> Setter:
    """Wrap a setter so it fills a freshly allocated value before assigning it."""

    def setter(ref: Any, raw: str) -> None:
        cell = Cell(ref.type, kinds.zero_value(ref.type))
        inner(cell, raw)
        ref.set(cell.get())

    return setter


class SetterRegistry:
    """Type-name indexed setters, consulted before capabilities and kinds."""

    def __init__(self, setters: Optional[dict[str, Setter]] = None):
        self._setters: dict[str, Setter] = dict(setters or {})

    def register(self, type_or_name: Any, setter: Setter) -> None:
        self._setters[kinds.type_name(type_or_name)] = setter

    def lookup(self, tp: Any) -> Optional[Setter]:
        return self._setters.get(kinds.type_name(tp))

    def __contains__(self, tp: Any) -> bool:
        return kinds.type_name(tp) in self._setters

    def copy(self) -> "SetterRegistry":
        return SetterRegistry(self._setters)

    def resolve(self, tp: Any, tag: Tag) -> Optional[Setter]:
        """
        Pick the setter for a field type.

        Order: registered type name, text capability, JSON capability
        (including pydantic models), then the built-in setter for the kind.
        Structs and unsupported kinds resolve to None.
        """
        setter = self.lookup(tp)
        if setter is not None:
            return setter

        if isinstance(tp, type):
            if issubclass(tp, TextUnmarshaler):
                return unmarshal_text_setter
            if issubclass(tp, JSONUnmarshaler):
                return unmarshal_json_setter
            if issubclass(tp, BaseModel):
                return model_json_setter

        kind = kinds.kind_of(tp)
        if kind == kinds.BYTES:
            return base64_bytes_setter if tag.encoding == "base64" else hex_bytes_setter
        return KIND_SETTERS.get(kind)


def default_registry() -> SetterRegistry:
    """New registry with the built-in type setters registered."""
    registry = SetterRegistry()
    registry.register(timedelta, duration_setter)
    return registry


_process_registry = default_registry()


def process_registry() -> SetterRegistry:
    """Registry used by binders that are not given one explicitly."""
    return _process_registry


def register_config_parser(type_or_name: Any, setter: Setter) -> None:
    """Register a setter for a type in the process registry."""
    _process_registry.register(type_or_name, setter)
