"""Immutable description of a Maven artifact loaded at runtime."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .constants import CHECKSUM_LENGTH, JAR_EXTENSION, PACKAGE_PLACEHOLDER, RELOCATED_SUFFIX
from .relocation import Relocation


def _require(value: Optional[str], name: str) -> str:
    if value is None or value == "":
        raise ValueError(f"{name} is required")
    return value


@dataclass(frozen=True)
class Library:
    """A Maven artifact that can be downloaded, relocated and loaded.

    Instances are normally created with :meth:`builder`. ``checksum`` is the
    binary SHA-256 digest of the jar; when it is ``None`` downloads are not
    verified.
    """

    group_id: str
    artifact_id: str
    version: str
    classifier: Optional[str] = None
    urls: Tuple[str, ...] = field(default_factory=tuple)
    checksum: Optional[bytes] = None
    relocations: Tuple[Relocation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        group_id = _require(self.group_id, "group_id").replace(PACKAGE_PLACEHOLDER, ".")
        object.__setattr__(self, "group_id", group_id)
        _require(self.artifact_id, "artifact_id")
        _require(self.version, "version")
        if self.classifier == "":
            raise ValueError("classifier must not be empty")
        if self.checksum is not None:
            checksum = bytes(self.checksum)
            if len(checksum) != CHECKSUM_LENGTH:
                raise ValueError(
                    f"checksum must be a {CHECKSUM_LENGTH}-byte SHA-256 digest, got {len(checksum)} bytes"
                )
            object.__setattr__(self, "checksum", checksum)
        object.__setattr__(self, "urls", tuple(self.urls or ()))
        object.__setattr__(self, "relocations", tuple(self.relocations or ()))

    @property
    def has_classifier(self) -> bool:
        return self.classifier is not None

    @property
    def has_checksum(self) -> bool:
        return self.checksum is not None

    @property
    def has_relocations(self) -> bool:
        return bool(self.relocations)

    @property
    def _stem(self) -> str:
        group_path = self.group_id.replace(".", "/")
        name = f"{self.artifact_id}-{self.version}"
        if self.has_classifier:
            name = f"{name}-{self.classifier}"
        return f"{group_path}/{self.artifact_id}/{self.version}/{name}"

    @property
    def path(self) -> str:
        """Relative Maven path of the jar, always ``/`` separated."""
        return self._stem + JAR_EXTENSION

    @property
    def relocated_path(self) -> Optional[str]:
        if not self.has_relocations:
            return None
        return self._stem + RELOCATED_SUFFIX + JAR_EXTENSION

    def __str__(self) -> str:
        name = f"{self.group_id}:{self.artifact_id}:{self.version}"
        if self.has_classifier:
            name = f"{name}:{self.classifier}"
        return name

    @staticmethod
    def builder() -> "LibraryBuilder":
        return LibraryBuilder()

    @classmethod
    def from_coordinate(cls, coordinate: str) -> "Library":
        """Parse ``group:artifact:version[:classifier]``."""
        parts = (coordinate or "").strip().split(":")
        if len(parts) not in (3, 4) or not all(parts):
            raise ValueError(f"Invalid library coordinate: {coordinate!r}")
        builder = cls.builder().group_id(parts[0]).artifact_id(parts[1]).version(parts[2])
        if len(parts) == 4:
            builder.classifier(parts[3])
        return builder.build()


class LibraryBuilder:
    def __init__(self) -> None:
        self._urls: List[str] = []
        self._group_id: Optional[str] = None
        self._artifact_id: Optional[str] = None
        self._version: Optional[str] = None
        self._classifier: Optional[str] = None
        self._checksum: Optional[bytes] = None
        self._relocations: List[Relocation] = []

    def url(self, url: str) -> "LibraryBuilder":
        self._urls.append(_require(url, "url"))
        return self

    def urls(self, urls: Iterable[str]) -> "LibraryBuilder":
        for url in urls:
            self.url(url)
        return self

    def group_id(self, group_id: str) -> "LibraryBuilder":
        self._group_id = _require(group_id, "group_id")
        return self

    def artifact_id(self, artifact_id: str) -> "LibraryBuilder":
        self._artifact_id = _require(artifact_id, "artifact_id")
        return self

    def version(self, version: str) -> "LibraryBuilder":
        self._version = _require(version, "version")
        return self

    def classifier(self, classifier: str) -> "LibraryBuilder":
        self._classifier = _require(classifier, "classifier")
        return self

    def checksum(self, checksum: bytes | str) -> "LibraryBuilder":
        """Set the SHA-256 checksum, either raw bytes or base64 text."""
        if checksum is None:
            raise ValueError("checksum is required")
        if isinstance(checksum, str):
            checksum = base64.b64decode(checksum, validate=True)
        self._checksum = bytes(checksum)
        return self

    def relocate(self, relocation: Relocation | str, relocated_pattern: Optional[str] = None) -> "LibraryBuilder":
        if isinstance(relocation, str):
            relocation = Relocation(relocation, _require(relocated_pattern, "relocated_pattern"))
        if relocation is None:
            raise ValueError("relocation is required")
        self._relocations.append(relocation)
        return self

    def build(self) -> Library:
        return Library(
            group_id=self._group_id,  # type: ignore[arg-type]
            artifact_id=self._artifact_id,  # type: ignore[arg-type]
            version=self._version,  # type: ignore[arg-type]
            classifier=self._classifier,
            urls=tuple(self._urls),
            checksum=self._checksum,
            relocations=tuple(self._relocations),
        )
