"""Errors raised while resolving, downloading and relocating libraries."""

from __future__ import annotations


class LibraryError(RuntimeError):
    """Base class for library management failures."""


class UnresolvableLibraryError(LibraryError):
    """No direct URL or repository produced a download candidate."""

    def __init__(self, library: object) -> None:
        super().__init__(f"Library '{library}' couldn't be resolved, add a repository")
        self.library = library


class DownloadFailedError(LibraryError):
    """Every download candidate was tried without success."""

    def __init__(self, library: object) -> None:
        super().__init__(f"Failed to download library '{library}'")
        self.library = library


class MalformedUrlError(LibraryError, ValueError):
    """A candidate URL could not be parsed or uses an unsupported scheme."""

    def __init__(self, url: str, reason: str = "") -> None:
        message = f"Malformed library URL: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.url = url


class RelocationError(LibraryError):
    """The relocation engine failed to produce a relocated jar."""


class CacheCommitError(LibraryError):
    """Writing or publishing a file into the library cache failed."""
