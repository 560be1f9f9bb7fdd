"""
Reflection-based config binder.
Walks a dataclass, resolves env vars, coerces types and binds them in place.
"""

from typing import Any, Iterable, Mapping, Optional

import structlog

from envconfig import kinds
from envconfig.environ import Environ
from envconfig.errors import ConfigError, ConversionError, RequiredMissingError
from envconfig.setters import SetterRegistry, has_capability, process_registry
from envconfig.walker import FieldDescriptor, walk

logger = structlog.get_logger(__name__)

_PLACEHOLDERS = {
    kinds.BOOL: "false # bool",
    kinds.INT: "0 # int",
    kinds.UINT: "0 # int",
    kinds.FLOAT: "0.0 # float",
    kinds.STRING: "# string",
    kinds.BYTES: "# bytes",
    kinds.MAP: "# [k=v, k=v, k=v]",
    kinds.SLICE: "# [v1, v2, v3]",
}


class Binder:
    """
    Binds environment values into dataclass instances.

    - environ: value source (default: os.environ, no prefix)
    - registry: type setters (default: the process registry)
    - strict: fail on fields no setter can handle instead of skipping them
    """

    def __init__(
        self,
        environ: Optional[Environ] = None,
        registry: Optional[SetterRegistry] = None,
        strict: bool = False,
    ):
        self.environ = environ if environ is not None else Environ()
        self.registry = registry if registry is not None else process_registry()
        self.strict = strict

    def fields(self, target: Any, prefix: Iterable[str] = ()) -> dict[str, FieldDescriptor]:
        return walk(target, prefix, self.registry, strict=self.strict)

    def load(self, target: Any, prefix: Iterable[str] = ()) -> Any:
        """
        Bind env values into target and return it.

        Stops at the first failing field. The target may be partially
        populated after an error and should be discarded.
        """
        descriptors = self.fields(target, prefix)

        for key, field in descriptors.items():
            raw = self.environ.getenv(key)
            if raw:
                self._apply(field, raw)
            elif field.tag.default is not None:
                logger.debug("config_default_applied", key=key)
                self._apply(field, field.tag.default)
            elif field.tag.required:
                raise RequiredMissingError(f"{self.environ.key_for(key)} required", key=key)

        logger.info("config_loaded", target=type(target).__name__, fields=len(descriptors))
        return target

    def _apply(self, field: FieldDescriptor, raw: str) -> None:
        try:
            field.setter(field.ref, raw)
        except ConfigError as e:
            raise type(e)(
                f"failed to set field '{field.key}' with value '{raw}': {e}",
                key=field.key,
                value=raw,
            ) from e
        except Exception as e:
            raise ConversionError(
                f"failed to set field '{field.key}' with value '{raw}': {e}",
                key=field.key,
                value=raw,
            ) from e

    def variables(self, target: Any, prefix: Iterable[str] = ()) -> list[str]:
        """
        Sorted `KEY=value` lines for every field the target recognizes.

        Values are the declared default, or a short placeholder describing the type.
        """
        descriptors = walk(target, prefix, self.registry, include_unsupported=True)
        lines = [
            f"{self.environ.key_for(key)}={_describe(field, self.registry)}"
            for key, field in descriptors.items()
        ]
        return sorted(lines)


def _describe(field: FieldDescriptor, registry: SetterRegistry) -> str:
    if field.tag.default:
        return field.tag.default
    if not field.supported:
        return "# unsupported"
    if field.type in registry or has_capability(field.type):
        return f"# {kinds.type_name(field.type)}"
    return _PLACEHOLDERS.get(field.kind, f"# {kinds.type_name(field.type)}")


def load_config(
    schema: Any,
    env: Optional[Mapping[str, str]] = None,
    prefix: str = "",
    registry: Optional[SetterRegistry] = None,
) -> Any:
    """
    Load config from the environment into a dataclass.

    - schema: a dataclass instance, or a dataclass class to instantiate with zero values
    - env: mapping to read from (default: os.environ). Pass a dict for tests.
    - prefix: application prefix prepended to every key
    - Returns: the populated instance
    - Raises: ConfigError on missing required values or conversion failures
    """
    target = kinds.zero_instance(schema) if isinstance(schema, type) else schema
    return Binder(Environ(prefix, env), registry).load(target)


def render_template(schema: Any, prefix: str = "", registry: Optional[SetterRegistry] = None) -> str:
    """Newline-separated `KEY=value` template of every recognized variable."""
    target = kinds.zero_instance(schema) if isinstance(schema, type) else schema
    return "\n".join(Binder(Environ(prefix), registry).variables(target))
