"""jar-relocator engine running on a JVM, and its self-hosted bootstrap."""

from __future__ import annotations

import logging
import os
import subprocess
from importlib.resources import as_file, files
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from pluginlibs.modules.librarymanage.domain import Library, Relocation, RelocationError
from pluginlibs.modules.librarymanage.domain.constants import GLOB_SEPARATOR
from pluginlibs.modules.librarymanage.fileget import LibraryDownloader
from pluginlibs.modules.librarymanage.loader import ClasspathLoader

LAUNCHER_SOURCE = "JarRelocatorLauncher.java"

# Libraries the relocation engine needs, fetched like any other library.
ENGINE_LIBRARIES = (
    Library.builder()
    .group_id("org.ow2.asm")
    .artifact_id("asm-commons")
    .version("6.0")
    .checksum("8bzlxkipagF73NAf5dWa+YRSl/17ebgcAVpvu9lxmr8=")
    .build(),
    Library.builder()
    .group_id("org.ow2.asm")
    .artifact_id("asm")
    .version("6.0")
    .checksum("3Ylxx0pOaXiZqOlcquTqh2DqbEhtxrl7F5XnV2BCBGE=")
    .build(),
    Library.builder()
    .group_id("me.lucko")
    .artifact_id("jar-relocator")
    .version("1.3")
    .checksum("mmz3ltQbS8xXGA2scM0ZH6raISlt4nukjCiU2l9Jxfs=")
    .build(),
)


class Relocator(Protocol):
    def relocate(self, source: Path, target: Path, relocations: Sequence[Relocation]) -> None:
        ...


class JarRelocatorEngine:
    """Runs ``me.lucko.jarrelocator.JarRelocator`` through a small launcher."""

    def __init__(self, classpath: Sequence[Path], java_bin: str = "java", timeout: Optional[float] = None) -> None:
        self.classpath = [Path(path) for path in classpath]
        self.java_bin = java_bin
        self.timeout = timeout
        self.log = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def to_arguments(relocations: Sequence[Relocation]) -> List[str]:
        arguments: List[str] = []
        for relocation in relocations:
            arguments.extend(
                [
                    relocation.pattern,
                    relocation.relocated_pattern,
                    GLOB_SEPARATOR.join(relocation.includes),
                    GLOB_SEPARATOR.join(relocation.excludes),
                ]
            )
        return arguments

    def build_command(self, launcher: Path, source: Path, target: Path, relocations: Sequence[Relocation]) -> List[str]:
        return [
            self.java_bin,
            "-cp",
            os.pathsep.join(str(path) for path in self.classpath),
            str(launcher),
            str(source),
            str(target),
            *self.to_arguments(relocations),
        ]

    def relocate(self, source: Path, target: Path, relocations: Sequence[Relocation]) -> None:
        if not relocations:
            raise ValueError("relocations must not be empty")
        with as_file(files(__package__) / "resources" / LAUNCHER_SOURCE) as launcher:
            command = self.build_command(launcher, source, target, relocations)
            self._run(command)

    def _run(self, command: List[str]) -> None:
        self.log.debug("Executing relocator cmd=%s timeout=%s", command, self.timeout)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise RelocationError(f"Java executable not found: {self.java_bin}") from exc
        except subprocess.TimeoutExpired as exc:
            raise RelocationError(f"Relocation timed out after {self.timeout}s") from exc
        if completed.stderr:
            self.log.debug("Relocator stderr: %s", completed.stderr.strip())
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise RelocationError(f"Relocator exited with status {completed.returncode}: {detail}")


class RelocatorBootstrap:
    """Creates a :class:`JarRelocatorEngine` after fetching its libraries."""

    def __init__(
        self,
        downloader: LibraryDownloader,
        *,
        java_bin: str = "java",
        timeout: Optional[float] = None,
        libraries: Sequence[Library] = ENGINE_LIBRARIES,
    ) -> None:
        self.downloader = downloader
        self.java_bin = java_bin
        self.timeout = timeout
        self.libraries = tuple(libraries)
        self.log = logging.getLogger(self.__class__.__name__)

    def __call__(self) -> JarRelocatorEngine:
        classpath = ClasspathLoader()
        for library in self.libraries:
            classpath.load(self.downloader.download(library))
        self.log.info("Relocation engine ready with %d libraries", len(self.libraries))
        return JarRelocatorEngine(classpath.paths, java_bin=self.java_bin, timeout=self.timeout)
