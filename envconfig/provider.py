"""
Named config registry.
Each registered config is bound under its name, so a config registered as
`queue` in an app with prefix `annotator` reads `ANNOTATOR_QUEUE_*` variables.
"""

from typing import Any, Optional

import structlog

from envconfig import kinds
from envconfig.base import Binder
from envconfig.environ import Environ
from envconfig.errors import ConfigNotFoundError

logger = structlog.get_logger(__name__)


class Provider:
    """Holds config objects by name and binds them from one Environ."""

    def __init__(self, environ: Optional[Environ] = None, binder: Optional[Binder] = None):
        self.environ = environ if environ is not None else Environ()
        self.binder = binder if binder is not None else Binder(self.environ)
        self._configs: dict[str, Any] = {}
        self._loaded: set[str] = set()

    def register(self, name: str, cfg: Any) -> Any:
        """Register a dataclass instance (or class, instantiated with zero values) under name."""
        if isinstance(cfg, type):
            cfg = kinds.zero_instance(cfg)
        self._configs[name] = cfg
        self._loaded.discard(name)
        return cfg

    def get(self, name: str) -> Any:
        """Return the named config, binding it on first access."""
        if name not in self._configs:
            raise ConfigNotFoundError(f"{name} config not found", key=name)
        if name not in self._loaded:
            self._load_one(name)
        return self._configs[name]

    def names(self) -> list[str]:
        return list(self._configs)

    def list(self) -> list[str]:
        """Sorted `KEY=value` template lines for every registered config."""
        lines: list[str] = []
        for name, cfg in self._configs.items():
            lines.extend(self.binder.variables(cfg, [name]))
        return sorted(lines)

    def load(self) -> None:
        """Bind every registered config that has not been bound yet."""
        for name in self._configs:
            if name not in self._loaded:
                self._load_one(name)

    def _load_one(self, name: str) -> None:
        logger.debug("config_binding", name=name)
        self.binder.load(self._configs[name], [name])
        self._loaded.add(name)
