"""Module registry resolving module names to base directories per environment."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Callable

from modfiles.errors import InvalidInputError
from modfiles.registry.scanner import is_valid_module_name, scan_modulepath
from modfiles.registry.types import Module

if TYPE_CHECKING:
    from modfiles.config import Config

logger = logging.getLogger(__name__)

__all__ = ["ModuleRegistry"]


class ModuleRegistry:
    """Finds modules by name, scoped by environment.

    Lookup order for ``find(name, environment)``:

    1. A module registered manually for that environment.
    2. A module registered manually without an environment.
    3. The first directory called ``name`` on the environment's modulepath.

    The environment's modulepath comes from ``environments.<env>.modulepath``
    in the config, falling back to the top-level ``modulepath``.

    Thread safety:
        Internally synchronized. Lookups and registrations may run
        concurrently.
    """

    def __init__(
        self,
        config: Config | None = None,
        modulepath: list[str] | None = None,
        follow_symlinks: bool = True,
    ) -> None:
        """Initialize the ModuleRegistry.

        Args:
            config: Optional Config supplying modulepath settings.
            modulepath: Default modulepath; overrides the config's top-level
                value.
            follow_symlinks: Whether symlinked module directories are accepted.
        """
        self._config = config
        if modulepath is not None:
            self._modulepath: list[str] = list(modulepath)
        elif config is not None:
            self._modulepath = list(config.get("modulepath", []) or [])
        else:
            self._modulepath = []
        self._follow_symlinks = follow_symlinks
        self._modules: dict[tuple[str | None, str], Module] = {}
        self._callbacks: dict[str, list[Callable[[Module], None]]] = {
            "register": [],
            "unregister": [],
        }
        self._lock = threading.RLock()

    # ----- Lookup -----

    def modulepath(self, environment: str | None = None) -> list[str]:
        """Return the directories searched for modules in ``environment``."""
        if environment is not None and self._config is not None:
            environments = self._config.get("environments") or {}
            settings = environments.get(environment) or {}
            env_path = settings.get("modulepath")
            if env_path is not None:
                return list(env_path)
        return list(self._modulepath)

    def find(self, name: str, environment: str | None = None) -> Module | None:
        """Look up a module by name. Returns None if not found.

        Names that cannot be module directories (including the empty string)
        always return None.
        """
        if not is_valid_module_name(name):
            logger.debug("Invalid module name %r, not searching", name)
            return None

        with self._lock:
            module = self._modules.get((environment, name)) or self._modules.get(
                (None, name)
            )
        if module is not None:
            return module

        for root in self.modulepath(environment):
            candidate = os.path.join(root, name)
            if not self._follow_symlinks and os.path.islink(candidate):
                continue
            if os.path.isdir(candidate):
                logger.debug(
                    "Found module '%s' at %s (environment=%s)",
                    name,
                    candidate,
                    environment,
                )
                return Module(
                    name=name,
                    path=os.path.abspath(candidate),
                    environment=environment,
                )

        logger.debug("Module '%s' not found (environment=%s)", name, environment)
        return None

    def has(self, name: str, environment: str | None = None) -> bool:
        """Check whether a module is visible in an environment."""
        return self.find(name, environment) is not None

    def list(self, environment: str | None = None) -> list[str]:
        """Return sorted module names visible in an environment."""
        discovered = scan_modulepath(
            self.modulepath(environment), follow_symlinks=self._follow_symlinks
        )
        names = {dm.name for dm in discovered}
        with self._lock:
            names.update(
                name
                for (env, name) in self._modules
                if env is None or env == environment
            )
        return sorted(names)

    @property
    def count(self) -> int:
        """Number of manually registered modules."""
        with self._lock:
            return len(self._modules)

    # ----- Manual Registration -----

    def register(self, module: Module) -> None:
        """Register a module for its environment (or for all, when None).

        Raises:
            InvalidInputError: If the name is invalid or already registered.
        """
        if not is_valid_module_name(module.name):
            raise InvalidInputError(message=f"Invalid module name: {module.name!r}")

        key = (module.environment, module.name)
        with self._lock:
            if key in self._modules:
                raise InvalidInputError(message=f"Module already exists: {module.name}")
            self._modules[key] = module

        self._trigger_event("register", module)

    def unregister(self, name: str, environment: str | None = None) -> bool:
        """Remove a manually registered module.

        Returns False if the module was not registered.
        """
        with self._lock:
            module = self._modules.pop((environment, name), None)
        if module is None:
            return False
        self._trigger_event("unregister", module)
        return True

    # ----- Event System -----

    def on(self, event: str, callback: Callable[[Module], None]) -> None:
        """Register a callback for 'register' or 'unregister' events.

        Raises:
            InvalidInputError: If event name is invalid.
        """
        with self._lock:
            if event not in self._callbacks:
                raise InvalidInputError(
                    message=f"Invalid event: {event}. "
                    "Must be 'register' or 'unregister'"
                )
            self._callbacks[event].append(callback)

    def _trigger_event(self, event: str, module: Module) -> None:
        """Trigger all callbacks for an event. Errors are logged and swallowed."""
        with self._lock:
            callbacks = list(self._callbacks.get(event, []))
        for cb in callbacks:
            try:
                cb(module)
            except Exception as e:
                logger.error(
                    "Callback error for event '%s' on module '%s': %s",
                    event,
                    module.name,
                    e,
                )
