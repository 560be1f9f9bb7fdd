"""Tests for the environment value source."""

import os

import pytest

from envconfig.environ import Environ, Environment


def test_getenv_with_prefix():
    environ = Environ("my-app", {"MY_APP_DB_HOST": "db"})
    assert environ.key_for("db_host") == "MY_APP_DB_HOST"
    assert environ.getenv("DB_HOST") == "db"
    assert environ.getenv("MISSING") == ""


def test_getenv_without_prefix():
    assert Environ(environ={"PORT": "80"}).getenv("PORT") == "80"


def test_getenv_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SVC_COLOR", "blue")
    assert Environ("svc").getenv("COLOR") == "blue"


@pytest.mark.parametrize(
    "name, local, test, production",
    [
        ("", True, False, False),
        ("local", True, False, False),
        ("test", False, True, False),
        ("prod", False, False, True),
        ("production", False, False, True),
        ("staging", False, False, False),
    ],
)
def test_environment_classification(name, local, test, production):
    env = Environment(name)
    assert env.is_local() is local
    assert env.is_test() is test
    assert env.is_production() is production


def test_environment_from_environ():
    env = Environment.from_environ(Environ("svc", {"SVC_ENVIRONMENT": "test"}))
    assert env.is_test()


def test_env_files_order():
    assert Environment("").env_files("extra.env") == ["extra.env", ".env.local", ".env"]
    assert Environment("test").env_files() == [".env.test", ".env"]


def test_load_env_files(tmp_path, monkeypatch):
    for name in ("APP_SIZE", "APP_COLOR", "APP_KEPT"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("APP_KEPT", "from-process")

    (tmp_path / ".env").write_text("APP_SIZE=from-env\nAPP_COLOR=blue\nAPP_KEPT=from-env\n")
    (tmp_path / ".env.test").write_text("APP_SIZE=from-test\n")

    loaded = Environment("test").load(directory=str(tmp_path))

    assert loaded == [str(tmp_path / ".env.test"), str(tmp_path / ".env")]
    assert os.environ["APP_SIZE"] == "from-test"
    assert os.environ["APP_COLOR"] == "blue"
    assert os.environ["APP_KEPT"] == "from-process"
