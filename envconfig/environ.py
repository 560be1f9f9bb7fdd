"""
Environment value source.
Environ looks keys up in os.environ (or a dict for tests) under an optional
application prefix; Environment classifies the deployment and loads .env files.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

import structlog
from dotenv import load_dotenv

from envconfig.naming import join_key

logger = structlog.get_logger(__name__)

ENVIRONMENT_KEY = "ENVIRONMENT"


class Environ:
    """Prefixed lookup of string values by key."""

    def __init__(self, prefix: str = "", environ: Optional[Mapping[str, str]] = None):
        self.prefix = prefix
        self._environ = environ

    @property
    def values(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def key_for(self, key: str) -> str:
        """Full variable name for a key, including the application prefix."""
        return join_key([self.prefix, key])

    def getenv(self, key: str) -> str:
        """Value for a key, or an empty string when it is not set."""
        return self.values.get(self.key_for(key), "")

    def __repr__(self) -> str:
        return f"Environ(prefix={self.prefix!r})"


class Environment(str):
    """Deployment environment name, e.g. `local`, `test` or `production`."""

    @classmethod
    def from_environ(cls, environ: Environ) -> "Environment":
        return cls(environ.getenv(ENVIRONMENT_KEY))

    def is_local(self) -> bool:
        return self in ("", "local")

    def is_production(self) -> bool:
        return self in ("prod", "production")

    def is_test(self) -> bool:
        return self == "test"

    def env_files(self, *files: str) -> list[str]:
        """Candidate .env files, most specific first."""
        names = list(files)
        names.append(".env.local" if self.is_local() else f".env.{self}")
        names.append(".env")
        return names

    def load(self, *files: str, directory: str = ".") -> list[str]:
        """
        Load .env files into os.environ without overriding variables already set.

        Files are read most specific first, so earlier files win. Returns the
        paths that were loaded.
        """
        loaded = []
        for name in self.env_files(*files):
            path = Path(directory) / name
            if path.is_file():
                load_dotenv(path, override=False)
                loaded.append(str(path))
        logger.debug("env_files_loaded", environment=str(self), files=loaded)
        return loaded
