"""
Struct walker.
Flattens a dataclass instance into an ordered mapping of env key -> FieldDescriptor,
binding every descriptor directly to the caller's object.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterable, Optional, get_type_hints

import structlog

from envconfig import kinds
from envconfig.errors import ConfigError, TagSyntaxError, UnsupportedKindError
from envconfig.naming import join_key
from envconfig.setters import FieldRef, Setter, SetterRegistry, optional_setter, process_registry
from envconfig.tags import Tag, declaration_for, parse_tag

logger = structlog.get_logger(__name__)


@dataclass
class FieldDescriptor:
    """One bindable field: its env key, parsed tag, storage handle and setter."""

    key: str
    tag: Tag
    ref: FieldRef
    setter: Optional[Setter]
    type: Any
    optional: bool = False

    @property
    def kind(self) -> Optional[str]:
        return kinds.kind_of(self.type)

    @property
    def supported(self) -> bool:
        return self.setter is not None


def walk(
    target: Any,
    prefix: Iterable[str] = (),
    registry: Optional[SetterRegistry] = None,
    strict: bool = False,
    include_unsupported: bool = False,
) -> dict[str, FieldDescriptor]:
    """
    Walk a dataclass instance and return its field descriptors in declaration order.

    - prefix: path segments prepended to every key
    - strict: raise UnsupportedKindError instead of skipping fields no setter handles
    - include_unsupported: emit unsupported fields with setter=None (for documentation)
    """
    if registry is None:
        registry = process_registry()
    if isinstance(target, type) or not dataclasses.is_dataclass(target):
        raise TypeError("target must be a dataclass instance")

    result: dict[str, FieldDescriptor] = {}
    _walk_struct(list(prefix), target, result, registry, strict, include_unsupported)
    return result


def _walk_struct(
    prefix: list[str],
    obj: Any,
    result: dict[str, FieldDescriptor],
    registry: SetterRegistry,
    strict: bool,
    include_unsupported: bool,
) -> None:
    try:
        hints = get_type_hints(type(obj), include_extras=True)
    except NameError:
        hints = {}

    for f in dataclasses.fields(obj):
        tp, extras, optional = kinds.unwrap(hints.get(f.name, f.type))
        try:
            tag = parse_tag(declaration_for(extras, f.metadata))
        except TagSyntaxError as e:
            raise TagSyntaxError(f"{type(obj).__name__}.{f.name}: {e}") from e

        is_struct = kinds.is_struct(tp)
        if tag.name is None or (tag.name == "" and not is_struct):
            tag.name = f.name

        if tag.skipped:
            logger.debug("config_field_skipped", field=f.name)
            continue

        path = prefix + [tag.name] if tag.name else list(prefix)
        ref = FieldRef(obj, f.name, tp)

        if tag.encoding is not None and kinds.kind_of(tp) != kinds.BYTES:
            raise TagSyntaxError(
                f"encoding is only valid on byte fields, not {kinds.type_name(tp)}",
                key=join_key(path),
            )

        setter = registry.resolve(tp, tag)

        if setter is None and is_struct:
            _walk_nested(path, ref, result, registry, strict, include_unsupported)
            continue

        key = join_key(path)
        if setter is None:
            if strict:
                raise UnsupportedKindError(f"no setter for {kinds.type_name(tp)}", key=key)
            logger.debug("config_field_unsupported", key=key, type=kinds.type_name(tp))
            if not include_unsupported:
                continue
        elif optional:
            setter = optional_setter(setter)

        if key in result:
            logger.debug("config_key_shadowed", key=key)
        result[key] = FieldDescriptor(key=key, tag=tag, ref=ref, setter=setter, type=tp, optional=optional)


def _walk_nested(
    path: list[str],
    ref: FieldRef,
    result: dict[str, FieldDescriptor],
    registry: SetterRegistry,
    strict: bool,
    include_unsupported: bool,
) -> None:
    """Recurse into a nested dataclass, allocating it lazily if the field is None."""
    current = ref.get()
    if isinstance(current, ref.type):
        _walk_struct(path, current, result, registry, strict, include_unsupported)
        return

    try:
        pending = kinds.zero_instance(ref.type)
    except TypeError as e:
        raise ConfigError(f"cannot allocate {kinds.type_name(ref.type)}: {e}", key=join_key(path)) from e

    nested: dict[str, FieldDescriptor] = {}
    _walk_struct(path, pending, nested, registry, strict, include_unsupported)
    for key, desc in nested.items():
        if desc.setter is not None:
            desc.setter = _attach_on_set(desc.setter, ref, pending)
        result[key] = desc


def _attach_on_set(inner: Setter, parent: FieldRef, pending: Any) -> Setter:
    def setter(ref: Any, raw: str) -> None:
        inner(ref, raw)
        if parent.get() is not pending:
            parent.set(pending)

    return setter
