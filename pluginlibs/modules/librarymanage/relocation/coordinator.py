"""Produces and caches relocated variants of library jars."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from pluginlibs.modules.librarymanage.cache import CacheStore
from pluginlibs.modules.librarymanage.domain import Library, LibraryError, RelocationError

from .engine import Relocator


class RelocationCoordinator:
    def __init__(self, cache: CacheStore, engine_factory: Callable[[], Relocator]) -> None:
        self.cache = cache
        self._engine_factory = engine_factory
        self._engine: Optional[Relocator] = None
        self._lock = threading.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    def engine(self) -> Relocator:
        """Return the relocation engine, bootstrapping it on first use only."""
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = self._engine_factory()
        return self._engine

    def prepare(self) -> None:
        self.engine()

    def ensure_relocated(self, library: Library, source: Path) -> Path:
        if not library.has_relocations:
            raise ValueError(f"Library '{library}' has no relocations")
        cached = self.cache.lookup(library.relocated_path)
        if cached is not None:
            return cached

        engine = self.engine()
        with self.cache.staging(library.relocated_path) as entry:
            try:
                engine.relocate(Path(source), entry.temp_path, library.relocations)
            except LibraryError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise RelocationError(f"Failed to relocate library '{library}': {exc}") from exc
            path = entry.commit()

        self.log.info("Relocations applied to %s", library)
        return path
