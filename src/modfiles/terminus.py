"""The module files terminus: resolves module file URIs and authorizes access."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Mapping, Union

from modfiles.fileset import path2instances
from modfiles.metadata import FileMetadata
from modfiles.options import ResolutionOptions
from modfiles.uri import ModuleFileURI, authorization_key

if TYPE_CHECKING:
    from modfiles.config import Config
    from modfiles.interfaces import (
        Authorizer,
        DirectoryExpander,
        ExistsPredicate,
        ModelFactory,
        ModuleFinder,
        NodeFinder,
    )

logger = logging.getLogger(__name__)

__all__ = ["DENIED_METHODS", "ModuleFiles"]

DENIED_METHODS = frozenset({"save", "destroy"})

Options = Union[ResolutionOptions, Mapping[str, Any], None]


class ModuleFiles:
    """Serves files from the ``files`` directory of modules.

    A request such as ``puppetmounts://host/modules/ntp/ntp.conf`` names the
    module ``ntp`` and the file ``ntp.conf`` inside it; the module is looked up
    in the requesting node's environment and the file is answered from
    ``<module path>/files/ntp.conf``.

    The terminus holds no per-request state. Absent modules and files are
    answered with None, denials with False; exceptions raised by the
    collaborators propagate to the caller.
    """

    def __init__(
        self,
        modules: ModuleFinder,
        authorizer: Authorizer,
        nodes: NodeFinder | None = None,
        environment: str = "",
        model: ModelFactory = FileMetadata,
        expander: DirectoryExpander = path2instances,
        exists: ExistsPredicate = os.path.exists,
    ) -> None:
        """Initialize the terminus.

        Args:
            modules: Finds a module by name and environment.
            authorizer: File server policy consulted by authorized().
            nodes: Finds a node by name; required only for requests naming a node.
            environment: Default environment when no node is given ('' for none).
            model: Builds the instance returned by find().
            expander: Builds the instances returned by search().
            exists: Filesystem existence predicate.
        """
        self._modules = modules
        self._authorizer = authorizer
        self._nodes = nodes
        self._environment = environment
        self._model = model
        self._expander = expander
        self._exists = exists

    @classmethod
    def from_config(cls, config: Config) -> ModuleFiles:
        """Build a terminus wired to the bundled registries and file server config.

        Without a ``fileserver_config`` entry every request is denied.
        """
        from modfiles.fileserving import FileServerConfig
        from modfiles.nodes import NodeRegistry
        from modfiles.registry import ModuleRegistry

        nodes_file = config.get("nodes_file")
        nodes = NodeRegistry.load(nodes_file) if nodes_file else NodeRegistry()

        fileserver_file = config.get("fileserver_config")
        if fileserver_file:
            authorizer = FileServerConfig.load(fileserver_file)
        else:
            authorizer = FileServerConfig(rules=[])

        return cls(
            modules=ModuleRegistry(config=config),
            authorizer=authorizer,
            nodes=nodes,
            environment=config.environment,
        )

    # ----- Environment -----

    def resolve_environment(self, options: Options = None) -> str | None:
        """Return the environment to look modules up in, or None.

        A named node decides the environment, even when it is unknown (then
        there is none). Without a node the configured default applies, with
        the empty string meaning no environment.
        """
        opts = ResolutionOptions.coerce(options)
        if opts.node is not None:
            if self._nodes is None:
                logger.debug(
                    "No node registry configured, node '%s' has no environment",
                    opts.node,
                )
                return None
            node = self._nodes.find(opts.node)
            if node is None:
                return None
            return node.environment
        if self._environment == "":
            return None
        return self._environment

    # ----- Lookup -----

    def find_path(self, uri: str, options: Options = None) -> str | None:
        """Resolve a URI to an existing file path, or None.

        URIs with ``.`` or ``..`` segments are never resolved, so a request
        cannot leave the module's ``files`` directory.
        """
        opts = ResolutionOptions.coerce(options)
        parsed = ModuleFileURI.parse(uri)
        if parsed.has_dot_segments:
            logger.debug("Refusing dot segments in %s", uri)
            return None
        environment = self.resolve_environment(opts)

        module = self._modules.find(parsed.module_name, environment)
        if module is None:
            logger.debug(
                "No module '%s' in environment %s for %s",
                parsed.module_name,
                environment,
                uri,
            )
            return None

        path = f"{module.path.rstrip('/')}/files"
        if parsed.relative_path:
            path = f"{path}/{parsed.relative_path}"

        if not self._exists(path):
            logger.debug("Module '%s' has no file %s", parsed.module_name, path)
            return None
        return path

    def find(self, uri: str, options: Options = None) -> Any:
        """Return the model instance for the file a URI names, or None."""
        opts = ResolutionOptions.coerce(options)
        path = self.find_path(uri, opts)
        if path is None:
            return None
        return self._model(path, links=opts.links)

    def search(self, uri: str, options: Options = None) -> list[Any] | None:
        """Return the instances below the path a URI names, or None.

        None means nothing resolvable; an empty list means the path resolved
        but expanded to nothing.
        """
        opts = ResolutionOptions.coerce(options)
        path = self.find_path(uri, opts)
        if path is None:
            return None
        return self._expander(path, opts.expansion_options())

    # ----- Authorization -----

    def authorized(self, method: str, uri: str, options: Options = None) -> bool:
        """Decide whether a request may run ``method`` against ``uri``.

        ``save`` and ``destroy`` are always refused; everything else is
        decided by the file server policy for the ``modules`` mount.
        """
        if method in DENIED_METHODS:
            logger.debug("Refusing %s on %s: module files are read-only", method, uri)
            return False

        opts = ResolutionOptions.coerce(options)
        key = authorization_key(uri)
        decision = self._authorizer.authorized(
            key, node=opts.node, ipaddress=opts.ipaddress
        )
        return bool(decision)
