"""Parsing of module file URIs and authorization keys."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

__all__ = ["MOUNT_NAME", "ModuleFileURI", "authorization_key", "uri_path"]

MOUNT_NAME = "modules"

_DOT_SEGMENTS = frozenset({".", ".."})


def uri_path(uri: str) -> str:
    """Return the percent-decoded path component of a URI.

    Scheme and host are ignored; a bare path is returned as-is (decoded).
    """
    return unquote(urlsplit(uri).path)


def _segments(path: str) -> list[str]:
    if path.startswith("/"):
        path = path[1:]
    return path.split("/") if path else []


@dataclass(frozen=True)
class ModuleFileURI:
    """A request URI split into module name and module-relative path.

    ``puppetmounts://host/modules/my/local/file`` parses to module ``my`` and
    relative path ``local/file``. Only a first segment that is exactly
    ``modules`` is treated as the mount; ``/modulestart/x`` names the module
    ``modulestart``.
    """

    raw: str
    path: str
    module_name: str
    relative_path: str

    @classmethod
    def parse(cls, uri: str) -> ModuleFileURI:
        path = uri_path(uri)
        segments = _segments(path)
        if segments and segments[0] == MOUNT_NAME:
            segments = segments[1:]
        # Nothing left after the mount: the module name is "".
        module_name = segments[0] if segments else ""
        relative_path = "/".join(segments[1:])
        return cls(
            raw=uri,
            path=path,
            module_name=module_name,
            relative_path=relative_path,
        )

    @property
    def has_dot_segments(self) -> bool:
        """Whether any module or path segment is ``.`` or ``..``.

        Checked after percent-decoding, so ``%2e%2e`` counts as ``..``.
        Such a path could leave the module's ``files`` directory and is
        never resolved.
        """
        segments = [self.module_name, *self.relative_path.split("/")]
        return any(s in _DOT_SEGMENTS for s in segments)

    @property
    def mount_stripped(self) -> str:
        """The path with any leading ``/modules`` mount segment removed."""
        if self.relative_path:
            return f"/{self.module_name}/{self.relative_path}"
        return f"/{self.module_name}"


def authorization_key(uri: str) -> str:
    """Build the path presented to the file server for an allow/deny decision.

    The key always starts with ``/modules/``: a path whose first segment is
    already ``modules`` is used unchanged, any other path gets ``/modules``
    prepended. A bare mount becomes ``/modules/``.
    """
    path = uri_path(uri)
    if not path.startswith("/"):
        path = "/" + path
    segments = _segments(path)
    if segments and segments[0] == MOUNT_NAME:
        if len(segments) == 1:
            return f"/{MOUNT_NAME}/"
        return path
    if path == "/":
        return f"/{MOUNT_NAME}/"
    return f"/{MOUNT_NAME}{path}"
