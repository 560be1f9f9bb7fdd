"""End-to-end tests for binding dataclasses from the environment."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Annotated, Optional

import pytest

from envconfig.base import Binder, load_config, render_template
from envconfig.environ import Environ
from envconfig.errors import ConversionError, RequiredMissingError, UnsupportedKindError
from envconfig import setters
from envconfig.setters import default_registry, register_config_parser
from envconfig.tags import Config

ENV = {
    "EMBEDDED": "true",
    "REQ": "imhere",
    "SLICED": '"a","b","c"',
    "CUSTOM": "1m",
    "MAP": '["a=b","c=d"]',
    "HEX_ENCODED": "0102030405060708090A0B0C0D0E0F",
    "BASE64_ENCODED": "AQIDBAUGBwgJCgsMDQ4P",
    "PTR": "123",
}

FIFTEEN_BYTES = bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x0E, 0x0F])


@dataclass
class EmbeddedConfig:
    embedded: bool = False


@dataclass
class SampleConfig:
    embedded: Annotated[EmbeddedConfig, Config(",")] = field(default_factory=EmbeddedConfig)
    with_default: Annotated[str, Config("def,default=/pki/issue")] = ""
    required: Annotated[str, Config("req,required")] = ""
    some_slice: Annotated[list[str], Config("sliced")] = field(default_factory=list)
    custom_parser: Annotated[timedelta, Config("custom,default=12345s")] = timedelta(0)
    map: dict[str, str] = field(default_factory=dict)
    hex_encoded: bytes = b""
    base64_encoded: Annotated[bytes, Config(",encoding=base64")] = b""
    ptr: Optional[int] = None
    unknown: int = 0
    skipped: Annotated[str, Config("-")] = "untouched"
    handlers: dict[str, int] = field(default_factory=dict)


@dataclass
class Port:
    port: int = 0


@dataclass
class Optionals:
    ptr: Optional[int] = None
    name: Annotated[Optional[str], Config("name,default=anon")] = None


def binder(env, prefix="", **kwargs):
    return Binder(Environ(prefix, env), default_registry(), **kwargs)


def test_load_end_to_end():
    """All supported kinds bind from their derived keys."""
    config = binder(ENV).load(SampleConfig())

    assert config.embedded.embedded is True
    assert config.with_default == "/pki/issue"
    assert config.required == "imhere"
    assert config.some_slice == ["a", "b", "c"]
    assert config.custom_parser == timedelta(minutes=1)
    assert config.map == {"a": "b", "c": "d"}
    assert config.hex_encoded == FIFTEEN_BYTES
    assert config.base64_encoded == FIFTEEN_BYTES
    assert config.ptr == 123
    assert config.unknown == 0
    assert config.skipped == "untouched"
    assert config.handlers == {}


def test_load_uses_defaults_when_unset():
    config = binder({"REQ": "x"}).load(SampleConfig())
    assert config.custom_parser == timedelta(seconds=12345)
    assert config.with_default == "/pki/issue"
    assert config.ptr is None


def test_empty_value_falls_back_to_default():
    config = binder({"REQ": "x", "DEF": ""}).load(SampleConfig())
    assert config.with_default == "/pki/issue"


def test_application_prefix():
    env = {f"WHEELHOUSE_{k}": v for k, v in ENV.items()}
    config = binder(env, prefix="wheelhouse").load(SampleConfig())
    assert config.required == "imhere"
    assert config.ptr == 123


def test_required_missing_names_the_key():
    with pytest.raises(RequiredMissingError, match="REQ") as exc:
        binder({}).load(SampleConfig())
    assert exc.value.key == "REQ"


def test_conversion_error_names_key_and_value():
    with pytest.raises(ConversionError) as exc:
        binder({"PORT": "eighty"}).load(Port())
    assert exc.value.key == "PORT"
    assert exc.value.value == "eighty"
    assert "PORT" in str(exc.value)
    assert "eighty" in str(exc.value)


def test_bad_default_is_a_conversion_error():
    @dataclass
    class BadDefault:
        wait: Annotated[timedelta, Config("wait,default=soon")] = timedelta(0)

    with pytest.raises(ConversionError) as exc:
        binder({}).load(BadDefault())
    assert exc.value.value == "soon"


def test_pointer_fields():
    """Optional fields stay None without a value and are allocated with one."""
    unset = binder({}).load(Optionals())
    assert unset.ptr is None
    assert unset.name == "anon"

    bound = binder({"PTR": "0x7B"}).load(Optionals())
    assert bound.ptr == 123


def test_load_is_idempotent():
    first = binder(ENV).load(SampleConfig())
    second = binder(ENV).load(SampleConfig())
    assert first == second


def test_strict_binder():
    with pytest.raises(UnsupportedKindError):
        binder(ENV, strict=True).load(SampleConfig())


def test_load_config_from_class():
    config = load_config(SampleConfig, env=ENV, registry=default_registry())
    assert isinstance(config, SampleConfig)
    assert config.required == "imhere"


def test_load_config_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SVC_PORT", "9000")
    assert load_config(Port, prefix="svc").port == 9000


def test_variables():
    lines = binder({}, prefix="test").variables(SampleConfig(), ["config"])
    assert lines == [
        "TEST_CONFIG_BASE64_ENCODED=# bytes",
        "TEST_CONFIG_CUSTOM=12345s",
        "TEST_CONFIG_DEF=/pki/issue",
        "TEST_CONFIG_EMBEDDED=false # bool",
        "TEST_CONFIG_HANDLERS=# unsupported",
        "TEST_CONFIG_HEX_ENCODED=# bytes",
        "TEST_CONFIG_MAP=# [k=v, k=v, k=v]",
        "TEST_CONFIG_PTR=0 # int",
        "TEST_CONFIG_REQ=# string",
        "TEST_CONFIG_SLICED=# [v1, v2, v3]",
        "TEST_CONFIG_UNKNOWN=0 # int",
    ]


def test_variables_need_no_values():
    """Documentation works without any variables set and leaves the target alone."""
    config = SampleConfig()
    binder({}).variables(config)
    assert config == SampleConfig()


def test_render_template():
    template = render_template(Optionals, prefix="app")
    assert template == "APP_NAME=anon\nAPP_PTR=0 # int"


class Color(Enum):
    RED = "red"
    GREEN = "green"


def color_setter(ref, raw):
    ref.set(Color[raw.upper()])


class Level:
    def __init__(self):
        self.value = 0

    def unmarshal_text(self, text: bytes) -> None:
        self.value = {"debug": 10, "info": 20}[text.decode()]


@dataclass
class Palette:
    color: Color = Color.RED
    level: Level = field(default_factory=Level)


@pytest.fixture
def process_registry(monkeypatch):
    """Fresh process registry, restored after the test."""
    registry = default_registry()
    monkeypatch.setattr(setters, "_process_registry", registry)
    return registry


def test_registered_setter_binds_through_process_registry(process_registry):
    register_config_parser(Color, color_setter)
    assert Color in process_registry

    palette = Binder(Environ("app", {"APP_COLOR": "green", "APP_LEVEL": "info"})).load(Palette())
    assert palette.color is Color.GREEN
    assert palette.level.value == 20


def test_registered_setter_error_names_key(process_registry):
    register_config_parser(Color, color_setter)

    with pytest.raises(ConversionError) as exc:
        Binder(Environ(environ={"COLOR": "purple"})).load(Palette())
    assert exc.value.key == "COLOR"
    assert exc.value.value == "purple"
    assert isinstance(exc.value.__cause__, KeyError)


def test_unmarshal_text_error_names_key():
    with pytest.raises(ConversionError) as exc:
        binder({"LEVEL": "nope"}).load(Palette())
    assert exc.value.key == "LEVEL"
    assert exc.value.value == "nope"
    assert "LEVEL" in str(exc.value)
