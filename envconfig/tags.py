"""
Tag types for config schema definitions.
Used inside Annotated[type, Config("...")] or as dataclass field metadata
to control env names, defaults, required-ness and byte encodings.
"""

from dataclasses import dataclass
from typing import Any, Optional

from envconfig.errors import TagSyntaxError

ENCODINGS = ("hex", "base64")

METADATA_KEY = "config"


class Config:
    """Field declaration: `name,default=<literal>,required,encoding=<hex|base64>`."""

    def __init__(self, declaration: str = ""):
        self.declaration = declaration

    def __repr__(self) -> str:
        return f"Config({self.declaration!r})"


@dataclass
class Tag:
    """Parsed field declaration."""

    name: Optional[str] = None
    encoding: Optional[str] = None
    default: Optional[str] = None
    required: bool = False

    @property
    def skipped(self) -> bool:
        return self.name == "-"

    def __str__(self) -> str:
        parts = []
        if self.name is not None:
            parts.append(f"name={self.name}")
        if self.encoding is not None:
            parts.append(f"encoding={self.encoding}")
        if self.default is not None:
            parts.append(f"default={self.default}")
        parts.append("required" if self.required else "optional")
        return ", ".join(parts)


def parse_tag(declaration: str) -> Tag:
    """
    Parse a declaration string into a Tag.

    The first comma-separated segment is always the name, even when empty.
    Remaining segments are `key=value` directives or the bare `required` flag;
    unknown keys are ignored.
    """
    tag = Tag()
    if not declaration:
        return tag

    name, *directives = declaration.split(",")
    tag.name = name

    for directive in directives:
        key, sep, value = directive.partition("=")
        if key == "default":
            if not sep:
                raise TagSyntaxError(f"default directive needs a value in {declaration!r}")
            tag.default = value
        elif key == "required":
            tag.required = True
        elif key == "encoding":
            if value not in ENCODINGS:
                raise TagSyntaxError(f"unsupported encoding {value!r} in {declaration!r}")
            tag.encoding = value

    return tag


def declaration_for(metadata: list[Any], field_metadata: Any = None) -> str:
    """Find the declaration string among Annotated extras or dataclass metadata."""
    for m in metadata:
        if isinstance(m, Config):
            return m.declaration
    if field_metadata:
        decl = field_metadata.get(METADATA_KEY)
        if isinstance(decl, Config):
            return decl.declaration
        if isinstance(decl, str):
            return decl
    return ""
