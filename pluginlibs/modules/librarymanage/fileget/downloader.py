"""HTTP client that downloads library jars into the local cache."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from pluginlibs.modules.librarymanage.cache import CacheStore
from pluginlibs.modules.librarymanage.domain import (
    DownloadFailedError,
    Library,
    MalformedUrlError,
    UnresolvableLibraryError,
)
from pluginlibs.modules.librarymanage.domain.constants import (
    CHECKSUM_ALGORITHM,
    CONNECT_TIMEOUT_SECS,
    HTTP_USER_AGENT,
    READ_TIMEOUT_SECS,
)

from .failures import classify_failure
from .repositories import RepositoryList
from .resolver import resolve


def build_client(
    connect_timeout: float = CONNECT_TIMEOUT_SECS,
    read_timeout: float = READ_TIMEOUT_SECS,
    user_agent: str = HTTP_USER_AGENT,
) -> httpx.Client:
    timeout = httpx.Timeout(connect=connect_timeout, read=read_timeout, write=read_timeout, pool=connect_timeout)
    return httpx.Client(timeout=timeout, follow_redirects=True, headers={"User-Agent": user_agent})


class LibraryDownloader:
    """Download library jars from direct URLs and repositories to the cache."""

    def __init__(
        self,
        cache: CacheStore,
        repositories: RepositoryList,
        client: Optional[httpx.Client] = None,
        *,
        user_agent: str = HTTP_USER_AGENT,
    ) -> None:
        self.cache = cache
        self.repositories = repositories
        self.user_agent = user_agent
        self.log = logging.getLogger(self.__class__.__name__)
        self._client = client or build_client(user_agent=user_agent)

    def resolve(self, library: Library) -> List[str]:
        return resolve(library, self.repositories.snapshot())

    def download(self, library: Library) -> Path:
        """Return the cached jar for ``library``, downloading it if needed.

        A cached file is trusted as-is. Otherwise each candidate URL is tried in
        order; the first body whose SHA-256 matches the declared checksum (or
        any body when no checksum is declared) is committed atomically.
        """
        if library is None:
            raise ValueError("library is required")
        cached = self.cache.lookup(library.path)
        if cached is not None:
            return cached

        urls = self.resolve(library)
        if not urls:
            raise UnresolvableLibraryError(library)

        with self.cache.staging(library.path) as entry:
            for url in urls:
                data = self._fetch(url)
                if data is None:
                    continue
                if library.has_checksum and not self._checksum_matches(library, url, data):
                    continue
                entry.write(data)
                return entry.commit()

        raise DownloadFailedError(library)

    def _checksum_matches(self, library: Library, url: str, data: bytes) -> bool:
        actual = hashlib.new(CHECKSUM_ALGORITHM, data).digest()
        if hmac.compare_digest(actual, library.checksum):
            return True
        self.log.warning("*** INVALID CHECKSUM ***")
        self.log.warning(" Library :  %s", library)
        self.log.warning(" URL :  %s", url)
        self.log.warning(" Expected :  %s", base64.b64encode(library.checksum).decode("ascii"))
        self.log.warning(" Actual :  %s", base64.b64encode(actual).decode("ascii"))
        return False

    def _fetch(self, url: str) -> Optional[bytes]:
        """Download one candidate; ``None`` means try the next one."""
        try:
            scheme = urlparse(url).scheme
        except ValueError as exc:
            raise MalformedUrlError(url, str(exc)) from exc
        try:
            if scheme == "file":
                return self._read_local(url)
            return self._read_remote(url)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            failure = classify_failure(exc)
            if failure.fatal:
                raise MalformedUrlError(url, str(exc)) from exc
            self.log.log(failure.level, "Skipping %s: %s (%s)", url, failure.reason, exc)
            return None

    def _read_local(self, url: str) -> bytes:
        path = Path(url2pathname(urlparse(url).path))
        data = path.read_bytes()
        self.log.info("Copied library %s", url)
        return data

    def _read_remote(self, url: str) -> bytes:
        start_time = time.time()
        buffer = bytearray()
        with self._client.stream("GET", url, headers={"User-Agent": self.user_agent}) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes(65536):
                if chunk:
                    buffer.extend(chunk)
        elapsed = max(time.time() - start_time, 1e-3)
        self.log.info("Downloaded library %s (%d bytes, %.2fs)", url, len(buffer), elapsed)
        return bytes(buffer)

    def close(self) -> None:
        self._client.close()
