import hashlib
import logging
from pathlib import Path

import httpx
import pytest

from pluginlibs.modules.librarymanage import LibraryManager
from pluginlibs.modules.librarymanage.domain import DownloadFailedError, Library, Relocation
from pluginlibs.modules.librarymanage.loader import ClasspathLoader
from pluginlibs.modules.librarymanage.relocation import RelocatorBootstrap
from pluginlibs.modules.librarymanage.service.manager import COMPONENT_LOGGERS
from pluginlibs.settings import Settings

JAR = b"PK\x03\x04 gson"


@pytest.fixture
def restore_log_levels():
    levels = {name: logging.getLogger(name).level for name in COMPONENT_LOGGERS}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class RecordingRelocator:
    def __init__(self) -> None:
        self.calls = 0

    def relocate(self, source, target, relocations):
        self.calls += 1
        Path(target).write_bytes(Path(source).read_bytes() + b" relocated")


def _manager(tmp_path, handler, relocator=None) -> LibraryManager:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    relocator = relocator or RecordingRelocator()
    return LibraryManager(tmp_path / "data", ClasspathLoader(), client=client, relocator_factory=lambda: relocator)


def _gson(relocation: Relocation | None = None) -> Library:
    builder = (
        Library.builder()
        .group_id("com.google.code.gson")
        .artifact_id("gson")
        .version("2.10")
        .checksum(hashlib.sha256(JAR).digest())
    )
    if relocation is not None:
        builder.relocate(relocation)
    return builder.build()


def test_load_library_adds_downloaded_jar_to_classpath(tmp_path):
    manager = _manager(tmp_path, lambda request: httpx.Response(200, content=JAR))
    manager.add_repository("https://repo.example/maven2")

    path = manager.load_library(_gson())

    assert path == manager.save_directory / "com" / "google" / "code" / "gson" / "gson" / "2.10" / "gson-2.10.jar"
    assert manager.save_directory == (tmp_path / "data" / "lib").absolute()
    assert manager.loader.paths == [path]


def test_load_library_relocates_before_loading(tmp_path):
    relocator = RecordingRelocator()
    manager = _manager(tmp_path, lambda request: httpx.Response(200, content=JAR), relocator)
    manager.add_repository("https://repo.example/")
    library = _gson(Relocation("com{}google{}gson", "me{}plugin{}gson"))

    first = manager.load_library(library)
    second = manager.load_library(library)

    assert first == second
    assert first.name == "gson-2.10-relocated.jar"
    assert first.read_bytes() == JAR + b" relocated"
    assert relocator.calls == 1
    assert manager.loader.paths == [first]
    assert library.relocations == (Relocation("com.google.gson", "me.plugin.gson"),)


def test_load_library_propagates_download_failure(tmp_path):
    manager = _manager(tmp_path, lambda request: httpx.Response(404))
    manager.add_maven_central()

    with pytest.raises(DownloadFailedError):
        manager.load_library(_gson())

    assert manager.loader.paths == []


def test_resolve_library_uses_repositories_in_order(tmp_path):
    manager = _manager(tmp_path, lambda request: httpx.Response(404))
    manager.add_repository("https://one.example")
    manager.add_jitpack()

    urls = manager.resolve_library(_gson())

    assert urls == [
        "https://one.example/com/google/code/gson/gson/2.10/gson-2.10.jar",
        "https://jitpack.io/com/google/code/gson/gson/2.10/gson-2.10.jar",
    ]
    assert manager.repositories == ["https://one.example/", "https://jitpack.io/"]


def test_set_log_level_applies_to_components(tmp_path, restore_log_levels):
    manager = _manager(tmp_path, lambda request: httpx.Response(404))

    manager.set_log_level("warning")

    assert manager.log_level == logging.WARNING
    assert manager.downloader.log.level == logging.WARNING
    with pytest.raises(ValueError):
        manager.set_log_level("chatty")


def test_warning_level_silences_relocator_bootstrap(tmp_path, caplog, restore_log_levels):
    class CachedDownloader:
        def download(self, library):
            path = tmp_path / Path(library.path).name
            path.write_bytes(b"jar")
            return path

    manager = _manager(tmp_path, lambda request: httpx.Response(404))
    manager.set_log_level(logging.WARNING)

    with caplog.at_level(logging.INFO):
        RelocatorBootstrap(CachedDownloader())()

    assert "Relocation engine ready" not in caplog.text
    assert all(logging.getLogger(name).level == logging.WARNING for name in COMPONENT_LOGGERS)


def test_from_settings(tmp_path, restore_log_levels):
    settings = Settings(_env_file=None, data_dir=tmp_path, log_level="DEBUG", java_bin="java21")

    manager = LibraryManager.from_settings(settings, ClasspathLoader())

    assert manager.save_directory == (tmp_path / "lib").absolute()
    assert manager.log_level == logging.DEBUG
    assert manager.relocations._engine_factory.java_bin == "java21"
    manager.close()
