"""Directory expansion for search requests."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Any

from modfiles.errors import InvalidInputError
from modfiles.metadata import LINK_MODES, FileMetadata

logger = logging.getLogger(__name__)

__all__ = ["Fileset", "path2instances"]


class Fileset:
    """The set of files below a root path.

    Args:
        path: Absolute root path; may be a file or a directory.
        recurse: Whether to descend into subdirectories.
        recurselimit: Maximum depth when recursing (None for unlimited,
            0 for the root only).
        ignore: Glob patterns matched case-sensitively against entry names;
            a matching entry is skipped together with everything below it.
        links: "manage" does not descend into symlinked directories,
            "follow" does.
    """

    def __init__(
        self,
        path: str,
        recurse: bool = False,
        recurselimit: int | None = None,
        ignore: list[str] | str | None = None,
        links: str | None = None,
    ) -> None:
        if not os.path.isabs(path):
            raise InvalidInputError(message=f"Fileset paths must be absolute: {path}")
        links = links or "manage"
        if links not in LINK_MODES:
            raise InvalidInputError(
                message=f"Invalid links mode '{links}', must be one of {LINK_MODES}"
            )
        if recurselimit is not None and recurselimit < 0:
            raise InvalidInputError(
                message=f"recurselimit must be >= 0, got {recurselimit}"
            )
        if isinstance(ignore, str):
            ignore = [ignore]

        self.path = path.rstrip("/") or "/"
        self.recurse = recurse
        self.recurselimit = recurselimit
        self.ignore: list[str] = list(ignore or [])
        self.links = links

    def files(self) -> list[str]:
        """Return sorted relative paths of every entry, '.' for the root itself."""
        root = Path(self.path)
        results: list[str] = ["."]
        if not self.recurse or not root.is_dir():
            return results

        follow = self.links == "follow"
        visited_real_paths: set[Path] = {root.resolve()}

        def _walk(dir_path: Path, depth: int) -> None:
            if self.recurselimit is not None and depth > self.recurselimit:
                return

            try:
                entries = list(os.scandir(dir_path))
            except PermissionError as e:
                logger.error("Permission denied scanning %s: %s", dir_path, e)
                return
            except OSError as e:
                logger.error("OS error scanning %s: %s", dir_path, e)
                return

            for entry in entries:
                if self._ignored(entry.name):
                    continue

                entry_path = Path(entry.path)
                results.append(str(entry_path.relative_to(root)))

                try:
                    is_dir = entry.is_dir(follow_symlinks=follow)
                    is_symlink = entry.is_symlink()
                except OSError as e:
                    logger.error("OS error accessing %s: %s", entry.path, e)
                    continue

                if not is_dir:
                    continue
                if is_symlink:
                    real = entry_path.resolve()
                    if real in visited_real_paths:
                        logger.warning(
                            "Symlink cycle detected at %s -> %s, skipping",
                            entry_path,
                            real,
                        )
                        continue
                    visited_real_paths.add(real)
                _walk(entry_path, depth + 1)

        _walk(root, depth=1)
        return sorted(results)

    def _ignored(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.ignore)


def path2instances(path: str, options: dict[str, Any]) -> list[FileMetadata]:
    """Expand a resolved path into one FileMetadata per file below it.

    Recognised options are ``recurse``, ``recurselimit``, ``ignore`` and
    ``links``; anything else is ignored.
    """
    links = options.get("links")
    fileset = Fileset(
        path,
        recurse=bool(options.get("recurse", False)),
        recurselimit=options.get("recurselimit"),
        ignore=options.get("ignore"),
        links=links,
    )
    return [
        FileMetadata(path, links=links, relative_path=rel) for rel in fileset.files()
    ]
