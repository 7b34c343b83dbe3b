"""File metadata instances returned for resolved module files."""

from __future__ import annotations

import grp
import hashlib
import os
import pwd
import stat
from typing import Any

from modfiles.errors import InvalidInputError

__all__ = ["FileMetadata", "LINK_MODES"]

LINK_MODES = ("manage", "follow")

_FTYPES = {
    stat.S_IFREG: "file",
    stat.S_IFDIR: "directory",
    stat.S_IFLNK: "link",
}


class FileMetadata:
    """Metadata about one file served from a module.

    Nothing is read from disk until :meth:`collect` is called.

    Attributes:
        path: Absolute path of the file on disk.
        links: "manage" reports symlinks as links, "follow" reports their
            targets.
        relative_path: Path relative to the searched root, set by directory
            expansion.
    """

    def __init__(
        self,
        path: str,
        links: str | None = None,
        relative_path: str | None = None,
    ) -> None:
        if not os.path.isabs(path):
            raise InvalidInputError(
                message=f"File metadata path must be absolute: {path}"
            )
        links = links or "manage"
        if links not in LINK_MODES:
            raise InvalidInputError(
                message=f"Invalid links mode '{links}', must be one of {LINK_MODES}"
            )
        self.path = path
        self.links = links
        self.relative_path = relative_path
        self.ftype: str | None = None
        self.mode: int | None = None
        self.owner: str | int | None = None
        self.group: str | int | None = None
        self.destination: str | None = None
        self.checksum: str | None = None

    @property
    def full_path(self) -> str:
        """The file's path, joined with ``relative_path`` when one is set."""
        if self.relative_path in (None, "", "."):
            return self.path
        return os.path.join(self.path, self.relative_path)

    def collect(self) -> FileMetadata:
        """Stat the file and fill in type, mode, ownership and checksum.

        Raises:
            OSError: If the file cannot be stat'ed or read.
        """
        path = self.full_path
        st = os.stat(path) if self.links == "follow" else os.lstat(path)

        self.ftype = _FTYPES.get(stat.S_IFMT(st.st_mode), "other")
        self.mode = stat.S_IMODE(st.st_mode)
        self.owner = _user_name(st.st_uid)
        self.group = _group_name(st.st_gid)

        if self.ftype == "link":
            self.destination = os.readlink(path)
        elif self.ftype == "file":
            self.checksum = "{md5}" + _md5_file(path)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the identity and collected attributes as a plain dict."""
        return {
            "path": self.path,
            "relative_path": self.relative_path,
            "links": self.links,
            "ftype": self.ftype,
            "mode": self.mode,
            "owner": self.owner,
            "group": self.group,
            "destination": self.destination,
            "checksum": self.checksum,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileMetadata):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> tuple[str, str | None, str]:
        return (self.path, self.relative_path, self.links)

    def __repr__(self) -> str:
        return (
            f"FileMetadata(path={self.path!r}, "
            f"relative_path={self.relative_path!r}, links={self.links!r})"
        )


def _md5_file(path: str) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _user_name(uid: int) -> str | int:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return uid


def _group_name(gid: int) -> str | int:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return gid
