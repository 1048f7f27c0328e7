"""Candidate URL resolution for libraries."""

from __future__ import annotations

from typing import List, Sequence

from pluginlibs.modules.librarymanage.domain import Library


def resolve(library: Library, repositories: Sequence[str]) -> List[str]:
    """Return direct URLs first, then one URL per repository, both in order.

    Duplicates are kept; an empty result is reported by the downloader.
    """
    if library is None:
        raise ValueError("library is required")
    urls = list(library.urls)
    urls.extend(repository + library.path for repository in repositories)
    return urls
