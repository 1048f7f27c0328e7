"""Classpath accumulated for a JVM launched by the host."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import List


class ClasspathLoader:
    """Collects loaded jars in load order, ignoring repeats."""

    def __init__(self) -> None:
        self._paths: List[Path] = []
        self._lock = threading.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    def load(self, path: Path) -> None:
        if path is None:
            raise ValueError("path is required")
        path = Path(path).absolute()
        if not path.is_file():
            raise FileNotFoundError(f"Library jar does not exist: {path}")
        with self._lock:
            if path in self._paths:
                return
            self._paths.append(path)
        self.log.debug("Added %s to classpath", path)

    @property
    def paths(self) -> List[Path]:
        with self._lock:
            return list(self._paths)

    def as_argument(self) -> str:
        return os.pathsep.join(str(path) for path in self.paths)
