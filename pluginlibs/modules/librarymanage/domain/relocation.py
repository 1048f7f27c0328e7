"""Relocation rules applied to library jars."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .constants import GLOB_SEPARATOR, PACKAGE_PLACEHOLDER


def _require(value: Optional[str], name: str) -> str:
    if value is None or value == "":
        raise ValueError(f"{name} is required")
    return value


def _globs(values: Iterable[str], name: str) -> Tuple[str, ...]:
    globs = tuple(values or ())
    for glob in globs:
        if GLOB_SEPARATOR in glob:
            raise ValueError(f"{name} glob must not contain '{GLOB_SEPARATOR}': {glob}")
    return globs


@dataclass(frozen=True)
class Relocation:
    """Rewrites ``pattern`` to ``relocated_pattern`` inside a jar.

    ``{}`` may be used in place of ``.`` so that build tools shading the host
    do not rewrite the pattern strings themselves. Empty ``includes`` and
    ``excludes`` leave every class and resource eligible.
    """

    pattern: str
    relocated_pattern: str
    includes: Tuple[str, ...] = field(default_factory=tuple)
    excludes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        pattern = _require(self.pattern, "pattern").replace(PACKAGE_PLACEHOLDER, ".")
        relocated = _require(self.relocated_pattern, "relocated_pattern").replace(PACKAGE_PLACEHOLDER, ".")
        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "relocated_pattern", relocated)
        object.__setattr__(self, "includes", _globs(self.includes, "include"))
        object.__setattr__(self, "excludes", _globs(self.excludes, "exclude"))

    @classmethod
    def of(
        cls,
        pattern: str,
        relocated_pattern: str,
        includes: Optional[Iterable[str]] = None,
        excludes: Optional[Iterable[str]] = None,
    ) -> "Relocation":
        return cls(pattern, relocated_pattern, tuple(includes or ()), tuple(excludes or ()))

    @staticmethod
    def builder() -> "RelocationBuilder":
        return RelocationBuilder()


class RelocationBuilder:
    def __init__(self) -> None:
        self._pattern: Optional[str] = None
        self._relocated_pattern: Optional[str] = None
        self._includes: List[str] = []
        self._excludes: List[str] = []

    def pattern(self, pattern: str) -> "RelocationBuilder":
        self._pattern = _require(pattern, "pattern")
        return self

    def relocated_pattern(self, relocated_pattern: str) -> "RelocationBuilder":
        self._relocated_pattern = _require(relocated_pattern, "relocated_pattern")
        return self

    def include(self, include: str) -> "RelocationBuilder":
        self._includes.append(_require(include, "include"))
        return self

    def exclude(self, exclude: str) -> "RelocationBuilder":
        self._excludes.append(_require(exclude, "exclude"))
        return self

    def build(self) -> Relocation:
        return Relocation(
            self._pattern,  # type: ignore[arg-type]
            self._relocated_pattern,  # type: ignore[arg-type]
            tuple(self._includes),
            tuple(self._excludes),
        )
