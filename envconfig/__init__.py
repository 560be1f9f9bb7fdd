"""envconfig: reflection-based env config binder with per-field tags."""

from envconfig.base import Binder, load_config, render_template
from envconfig.environ import Environ, Environment
from envconfig.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConversionError,
    RequiredMissingError,
    TagSyntaxError,
    UnsupportedKindError,
)
from envconfig.kinds import uint
from envconfig.naming import normalize
from envconfig.provider import Provider
from envconfig.setters import (
    JSONUnmarshaler,
    SetterRegistry,
    TextUnmarshaler,
    default_registry,
    register_config_parser,
)
from envconfig.tags import Config, Tag, parse_tag
from envconfig.walker import FieldDescriptor, walk

__all__ = [
    "load_config",
    "render_template",
    "Binder",
    "Provider",
    "Environ",
    "Environment",
    "Config",
    "Tag",
    "parse_tag",
    "normalize",
    "walk",
    "FieldDescriptor",
    "SetterRegistry",
    "default_registry",
    "register_config_parser",
    "TextUnmarshaler",
    "JSONUnmarshaler",
    "uint",
    "ConfigError",
    "TagSyntaxError",
    "ConversionError",
    "RequiredMissingError",
    "UnsupportedKindError",
    "ConfigNotFoundError",
]
