"""Filesystem cache for downloaded and relocated library jars."""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from pluginlibs.modules.librarymanage.domain import CacheCommitError
from pluginlibs.modules.librarymanage.domain.constants import TEMP_SUFFIX


class StagedEntry:
    """A cache entry being written through a private ``.tmp`` sibling.

    Each writer gets its own temp file next to ``target``, so concurrent
    writers of the same entry never share a partially written file.
    """

    def __init__(self, target: Path, temp_path: Path) -> None:
        self.target = target
        self.temp_path = temp_path
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def create(cls, target: Path) -> "StagedEntry":
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(dir=target.parent, prefix=target.name + ".", suffix=TEMP_SUFFIX)
        except OSError as exc:
            raise CacheCommitError(f"Failed to stage {target}: {exc}") from exc
        os.close(fd)
        return cls(target, Path(name))

    def write(self, data: bytes) -> None:
        try:
            self.temp_path.write_bytes(data)
        except OSError as exc:
            raise CacheCommitError(f"Failed to write {self.temp_path}: {exc}") from exc

    def commit(self) -> Path:
        """Atomically publish the staged file at ``target``.

        If the rename fails but another writer already published the entry,
        that copy is used.
        """
        try:
            os.replace(self.temp_path, self.target)
        except OSError as exc:
            if self.target.is_file():
                self.log.debug("Using %s published concurrently: %s", self.target, exc)
                return self.target
            raise CacheCommitError(f"Failed to publish {self.target}: {exc}") from exc
        return self.target

    def discard(self) -> None:
        try:
            self.temp_path.unlink(missing_ok=True)
        except OSError as exc:
            self.log.debug("Could not remove %s: %s", self.temp_path, exc)


class CacheStore:
    """Jars addressed by their relative Maven path below a single root.

    A file at the resolved path is the cache entry; there is no index. Writers
    stage into their own ``.tmp`` sibling and rename it into place so readers
    never observe partial content. When two writers race, the last rename wins.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).absolute()
        self.log = logging.getLogger(self.__class__.__name__)

    def resolve(self, relative: str) -> Path:
        return self.root.joinpath(*relative.split("/"))

    def lookup(self, relative: str) -> Optional[Path]:
        path = self.resolve(relative)
        if path.exists():
            return path
        return None

    @contextmanager
    def staging(self, relative: str) -> Iterator[StagedEntry]:
        entry = StagedEntry.create(self.resolve(relative))
        try:
            yield entry
        finally:
            entry.discard()
