"""Ordered repository base URLs shared by every resolution."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List

from pluginlibs.modules.librarymanage.domain.constants import (
    JCENTER,
    JITPACK,
    MAVEN_CENTRAL,
    MAVEN_LOCAL_DIR,
    SONATYPE,
)


def normalize_repository(url: str) -> str:
    if not url:
        raise ValueError("url is required")
    return url if url.endswith("/") else url + "/"


def maven_local_url() -> str:
    return (Path.home() / MAVEN_LOCAL_DIR).absolute().as_uri()


PRESETS = {
    "maven_central": lambda: MAVEN_CENTRAL,
    "maven_local": maven_local_url,
    "sonatype": lambda: SONATYPE,
    "jcenter": lambda: JCENTER,
    "jitpack": lambda: JITPACK,
}


class RepositoryList:
    """Append-only list of repositories, copied before every read."""

    def __init__(self) -> None:
        self._repositories: List[str] = []
        self._lock = threading.Lock()

    def add(self, url: str) -> str:
        repository = normalize_repository(url)
        with self._lock:
            self._repositories.append(repository)
        return repository

    def add_preset(self, name: str) -> str:
        try:
            factory = PRESETS[name]
        except KeyError:
            raise ValueError(f"Unknown repository preset: {name}") from None
        return self.add(factory())

    def snapshot(self) -> List[str]:
        with self._lock:
            return list(self._repositories)

    def __len__(self) -> int:
        with self._lock:
            return len(self._repositories)
