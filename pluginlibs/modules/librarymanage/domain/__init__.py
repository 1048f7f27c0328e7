from .errors import (
    CacheCommitError,
    DownloadFailedError,
    LibraryError,
    MalformedUrlError,
    RelocationError,
    UnresolvableLibraryError,
)
from .library import Library, LibraryBuilder
from .relocation import Relocation, RelocationBuilder

__all__ = [
    "CacheCommitError",
    "DownloadFailedError",
    "Library",
    "LibraryBuilder",
    "LibraryError",
    "MalformedUrlError",
    "Relocation",
    "RelocationBuilder",
    "RelocationError",
    "UnresolvableLibraryError",
]
