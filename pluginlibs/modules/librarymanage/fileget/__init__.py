from .downloader import LibraryDownloader, build_client
from .failures import DownloadFailure, FailureAction, classify_failure
from .repositories import PRESETS, RepositoryList, normalize_repository
from .resolver import resolve

__all__ = [
    "DownloadFailure",
    "FailureAction",
    "LibraryDownloader",
    "PRESETS",
    "RepositoryList",
    "build_client",
    "classify_failure",
    "normalize_repository",
    "resolve",
]
