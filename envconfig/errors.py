"""Error types raised while binding config from the environment."""

from typing import Optional


class ConfigError(Exception):
    """Base class for config binding failures.

    `key` is the derived environment key of the offending field and `value`
    the raw string that was being applied, when known.
    """

    def __init__(self, message: str, key: Optional[str] = None, value: Optional[str] = None):
        self.key = key
        self.value = value
        super().__init__(message)


class TagSyntaxError(ConfigError):
    """Raised for a malformed directive or an unsupported encoding."""


class ConversionError(ConfigError, ValueError):
    """Raised when a raw string cannot be converted to the field type."""


class RequiredMissingError(ConfigError):
    """Raised when a required field has no value and no default."""


class UnsupportedKindError(ConfigError):
    """Raised in strict mode for fields with no applicable setter."""


class ConfigNotFoundError(ConfigError, KeyError):
    """Raised when a named config was never registered with a provider."""

    def __str__(self) -> str:
        return Exception.__str__(self)
