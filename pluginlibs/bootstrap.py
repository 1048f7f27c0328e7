"""Service wiring and startup flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pluginlibs.modules.librarymanage import LibraryManager
from pluginlibs.modules.librarymanage.domain import Library
from pluginlibs.modules.librarymanage.loader import ClasspathLoader

from .settings import Settings

log = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container that wires plain-Python services with shared settings."""

    settings: Settings
    classpath: ClasspathLoader = field(init=False)
    library_manager: LibraryManager = field(init=False)

    def __post_init__(self) -> None:
        self.classpath = ClasspathLoader()
        self.library_manager = LibraryManager.from_settings(self.settings, self.classpath)


def bootstrap_services(container: ServiceContainer) -> None:
    """Register configured repositories and load preconfigured libraries."""

    settings = container.settings
    manager = container.library_manager

    log.info("...................RUN...................")
    for preset in settings.enabled_presets():
        log.info("Adding %s repository: %s", preset, manager.add_preset(preset))
    for url in settings.repositories:
        log.info("Adding repository: %s", manager.add_repository(url))
    log.info("Library cache at %s with %d repositories", manager.save_directory, len(manager.repositories))

    if settings.preload_relocator:
        log.info("...................RELOCATOR-BEGIN...................")
        manager.prepare_relocator()
        log.info("...................RELOCATOR-END...................")

    for coordinate in settings.preload_libraries:
        library = Library.from_coordinate(coordinate)
        manager.load_library(library)
    if settings.preload_libraries:
        log.info("Preloaded %d libraries", len(settings.preload_libraries))
