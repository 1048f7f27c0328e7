"""Library manager service: resolve, download, relocate and load jars."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

import httpx

from pluginlibs.modules.librarymanage.cache import CacheStore
from pluginlibs.modules.librarymanage.domain import Library
from pluginlibs.modules.librarymanage.domain.constants import CACHE_DIR_NAME, HTTP_USER_AGENT
from pluginlibs.modules.librarymanage.fileget import LibraryDownloader, RepositoryList, build_client
from pluginlibs.modules.librarymanage.loader import LibraryLoader
from pluginlibs.modules.librarymanage.relocation import RelocationCoordinator, RelocatorBootstrap, Relocator
from pluginlibs.settings import Settings

# Loggers are named after the component classes that own them
COMPONENT_LOGGERS = (
    "LibraryManager",
    "CacheStore",
    "StagedEntry",
    "LibraryDownloader",
    "RelocationCoordinator",
    "RelocatorBootstrap",
    "JarRelocatorEngine",
    "ClasspathLoader",
)


class LibraryManager:
    """Runtime dependency manager for plugins.

    Libraries are resolved through their direct URLs and then the configured
    repositories, downloaded into ``<data_dir>/lib``, relocated when they
    declare relocation rules and finally handed to the host ``loader``.
    Transitive dependencies are not followed; every library must be loaded
    explicitly.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        loader: LibraryLoader,
        *,
        client: Optional[httpx.Client] = None,
        user_agent: str = HTTP_USER_AGENT,
        relocator_factory: Optional[Callable[[], Relocator]] = None,
        java_bin: str = "java",
        relocation_timeout: Optional[float] = None,
    ) -> None:
        if loader is None:
            raise ValueError("loader is required")
        self.loader = loader
        self.log = logging.getLogger(self.__class__.__name__)
        self.cache = CacheStore(Path(data_dir).absolute() / CACHE_DIR_NAME)
        self._repositories = RepositoryList()
        self.downloader = LibraryDownloader(self.cache, self._repositories, client, user_agent=user_agent)
        if relocator_factory is None:
            relocator_factory = RelocatorBootstrap(self.downloader, java_bin=java_bin, timeout=relocation_timeout)
        self.relocations = RelocationCoordinator(self.cache, relocator_factory)

    @classmethod
    def from_settings(cls, settings: Settings, loader: LibraryLoader) -> "LibraryManager":
        client = build_client(settings.connect_timeout, settings.read_timeout)
        manager = cls(
            settings.data_dir,
            loader,
            client=client,
            java_bin=settings.java_bin,
            relocation_timeout=settings.relocation_timeout,
        )
        manager.set_log_level(settings.log_level)
        return manager

    @property
    def save_directory(self) -> Path:
        return self.cache.root

    def _loggers(self) -> List[logging.Logger]:
        return [logging.getLogger(name) for name in COMPONENT_LOGGERS]

    @property
    def log_level(self) -> int:
        return self.log.getEffectiveLevel()

    def set_log_level(self, level: Union[int, str]) -> None:
        """Silence messages less severe than ``level``.

        ``WARNING`` hides download and relocation progress but still reports
        invalid checksums.
        """
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"Unknown log level: {level}")
            level = resolved
        for logger in self._loggers():
            logger.setLevel(level)

    @property
    def repositories(self) -> List[str]:
        return self._repositories.snapshot()

    def add_repository(self, url: str) -> str:
        repository = self._repositories.add(url)
        self.log.debug("Added repository %s", repository)
        return repository

    def add_preset(self, name: str) -> str:
        return self._repositories.add_preset(name)

    def add_maven_central(self) -> str:
        return self.add_preset("maven_central")

    def add_maven_local(self) -> str:
        return self.add_preset("maven_local")

    def add_sonatype(self) -> str:
        return self.add_preset("sonatype")

    def add_jcenter(self) -> str:
        return self.add_preset("jcenter")

    def add_jitpack(self) -> str:
        return self.add_preset("jitpack")

    def resolve_library(self, library: Library) -> List[str]:
        return self.downloader.resolve(library)

    def download_library(self, library: Library) -> Path:
        return self.downloader.download(library)

    def prepare_relocator(self) -> None:
        """Fetch the relocation engine now instead of on the first relocation."""
        self.relocations.prepare()

    def load_library(self, library: Library) -> Path:
        """Download ``library``, relocate it if required and load it."""
        if library is None:
            raise ValueError("library is required")
        path = self.download_library(library)
        if library.has_relocations:
            path = self.relocations.ensure_relocated(library, path)
        self.loader.load(path)
        self.log.info("Loaded library %s from %s", library, path)
        return path

    def close(self) -> None:
        self.downloader.close()
