"""Host capability that makes a jar available to the plugin runtime."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class LibraryLoader(Protocol):
    def load(self, path: Path) -> None:
        ...
