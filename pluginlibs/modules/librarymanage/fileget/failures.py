"""Classification of download failures into recoverable and fatal."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

import httpx

NOT_FOUND_STATUSES = {404, 410}


class FailureAction(str, Enum):
    NEXT_CANDIDATE = "next_candidate"
    FATAL = "fatal"


@dataclass(frozen=True)
class DownloadFailure:
    action: FailureAction
    reason: str
    level: int = logging.DEBUG

    @property
    def fatal(self) -> bool:
        return self.action is FailureAction.FATAL


def _causes(exc: Optional[BaseException]) -> Iterator[BaseException]:
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def _is_unknown_host(exc: BaseException) -> bool:
    return any(isinstance(cause, socket.gaierror) for cause in _causes(exc))


def classify_failure(exc: BaseException) -> DownloadFailure:
    """Map a raw download exception to the action the downloader takes."""
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return DownloadFailure(FailureAction.FATAL, "malformed URL", logging.ERROR)
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code in NOT_FOUND_STATUSES:
            return DownloadFailure(FailureAction.NEXT_CANDIDATE, "file not found")
        return DownloadFailure(
            FailureAction.NEXT_CANDIDATE,
            f"unexpected HTTP status {exc.response.status_code}",
            logging.WARNING,
        )
    if isinstance(exc, httpx.ConnectTimeout):
        return DownloadFailure(FailureAction.NEXT_CANDIDATE, "connect timed out")
    if isinstance(exc, httpx.ReadTimeout):
        return DownloadFailure(FailureAction.NEXT_CANDIDATE, "download timed out", logging.WARNING)
    if isinstance(exc, (httpx.ConnectError, OSError)) and _is_unknown_host(exc):
        return DownloadFailure(FailureAction.NEXT_CANDIDATE, "unknown host")
    if isinstance(exc, FileNotFoundError):
        return DownloadFailure(FailureAction.NEXT_CANDIDATE, "file not found")
    if isinstance(exc, (httpx.HTTPError, OSError)):
        return DownloadFailure(FailureAction.NEXT_CANDIDATE, "unexpected I/O error", logging.WARNING)
    return DownloadFailure(FailureAction.FATAL, type(exc).__name__, logging.ERROR)
