import os
import subprocess
import threading
import time
from pathlib import Path

import pytest

from pluginlibs.modules.librarymanage.cache import CacheStore
from pluginlibs.modules.librarymanage.domain import Library, Relocation, RelocationError
from pluginlibs.modules.librarymanage.relocation import (
    ENGINE_LIBRARIES,
    JarRelocatorEngine,
    RelocationCoordinator,
    RelocatorBootstrap,
)

RULE = Relocation.of("com{}google{}gson", "me{}plugin{}gson", ["com.google.gson.**"], [])


def _library() -> Library:
    return Library.builder().group_id("com.google.code.gson").artifact_id("gson").version("2.10").relocate(RULE).build()


def _source(tmp_path) -> Path:
    source = tmp_path / "gson-2.10.jar"
    source.write_bytes(b"original")
    return source


class FakeRelocator:
    def __init__(self) -> None:
        self.calls = []

    def relocate(self, source, target, relocations):
        self.calls.append((Path(source), Path(target), tuple(relocations)))
        Path(target).write_bytes(Path(source).read_bytes() + b"+relocated")


class FailingRelocator:
    def relocate(self, source, target, relocations):
        Path(target).write_bytes(b"half written")
        raise RuntimeError("engine crashed")


def test_relocated_jar_is_committed(tmp_path):
    relocator = FakeRelocator()
    coordinator = RelocationCoordinator(CacheStore(tmp_path / "lib"), lambda: relocator)

    path = coordinator.ensure_relocated(_library(), _source(tmp_path))

    assert path.name == "gson-2.10-relocated.jar"
    assert path.read_bytes() == b"original+relocated"
    assert relocator.calls[0][1].name.startswith("gson-2.10-relocated.jar.")
    assert relocator.calls[0][1].suffix == ".tmp"
    assert relocator.calls[0][1].parent == path.parent
    assert relocator.calls[0][2] == (RULE,)
    assert not relocator.calls[0][1].exists()


def test_existing_relocated_jar_is_reused(tmp_path):
    cache = CacheStore(tmp_path / "lib")
    existing = cache.resolve(_library().relocated_path)
    existing.parent.mkdir(parents=True)
    existing.write_bytes(b"cached")

    def factory():
        raise AssertionError("engine must not be created")

    coordinator = RelocationCoordinator(cache, factory)

    assert coordinator.ensure_relocated(_library(), _source(tmp_path)) == existing


def test_relocation_failure_is_fatal_and_cleans_up(tmp_path):
    coordinator = RelocationCoordinator(CacheStore(tmp_path / "lib"), FailingRelocator)

    with pytest.raises(RelocationError):
        coordinator.ensure_relocated(_library(), _source(tmp_path))

    assert [p for p in (tmp_path / "lib").rglob("*") if p.is_file()] == []


def test_library_without_relocations_is_rejected(tmp_path):
    coordinator = RelocationCoordinator(CacheStore(tmp_path / "lib"), FakeRelocator)
    library = Library.builder().group_id("g").artifact_id("a").version("1").build()

    with pytest.raises(ValueError):
        coordinator.ensure_relocated(library, _source(tmp_path))


def test_engine_is_bootstrapped_once_under_contention(tmp_path):
    created = []

    def factory():
        created.append(threading.get_ident())
        time.sleep(0.05)
        return FakeRelocator()

    coordinator = RelocationCoordinator(CacheStore(tmp_path / "lib"), factory)
    barrier = threading.Barrier(8)
    engines = []

    def worker():
        barrier.wait()
        engines.append(coordinator.engine())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(created) == 1
    assert len({id(engine) for engine in engines}) == 1


def test_concurrent_relocations_of_same_library_both_succeed(tmp_path):
    barrier = threading.Barrier(2, timeout=5)

    class WaitingRelocator(FakeRelocator):
        def relocate(self, source, target, relocations):
            super().relocate(source, target, relocations)
            barrier.wait()

    relocator = WaitingRelocator()
    coordinator = RelocationCoordinator(CacheStore(tmp_path / "lib"), lambda: relocator)
    source = _source(tmp_path)
    paths, errors = [], []

    def worker():
        try:
            paths.append(coordinator.ensure_relocated(_library(), source))
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(relocator.calls) == 2
    assert relocator.calls[0][1] != relocator.calls[1][1]
    assert len(set(paths)) == 1
    assert paths[0].read_bytes() == b"original+relocated"
    assert [p for p in (tmp_path / "lib").rglob("*") if p.is_file()] == [paths[0]]


def test_engine_builds_java_command(tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd, *_, **__):
        calls.append(cmd)

        class Result:
            returncode = 0
            stdout = ""
            stderr = ""

        return Result()

    monkeypatch.setattr(subprocess, "run", fake_run)
    classpath = [tmp_path / "asm-commons-6.0.jar", tmp_path / "asm-6.0.jar", tmp_path / "jar-relocator-1.3.jar"]
    engine = JarRelocatorEngine(classpath, java_bin="/opt/java/bin/java")

    engine.relocate(tmp_path / "in.jar", tmp_path / "out.jar.tmp", [RULE, Relocation("org{}slf4j", "me{}slf4j")])

    command = calls[0]
    assert command[0] == "/opt/java/bin/java"
    assert command[1] == "-cp"
    assert command[2].split(os.pathsep) == [str(path) for path in classpath]
    assert command[3].endswith("JarRelocatorLauncher.java")
    assert command[4:6] == [str(tmp_path / "in.jar"), str(tmp_path / "out.jar.tmp")]
    assert command[6:] == [
        "com.google.gson",
        "me.plugin.gson",
        "com.google.gson.**",
        "",
        "org.slf4j",
        "me.slf4j",
        "",
        "",
    ]


def test_engine_reports_non_zero_exit(tmp_path, monkeypatch):
    def fake_run(cmd, *_, **__):
        class Result:
            returncode = 1
            stdout = ""
            stderr = "java.util.zip.ZipException: zip END header not found"

        return Result()

    monkeypatch.setattr(subprocess, "run", fake_run)
    engine = JarRelocatorEngine([tmp_path / "jar-relocator-1.3.jar"])

    with pytest.raises(RelocationError, match="ZipException"):
        engine.relocate(tmp_path / "in.jar", tmp_path / "out.jar", [RULE])


def test_engine_reports_missing_java(tmp_path, monkeypatch):
    def fake_run(cmd, *_, **__):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)
    engine = JarRelocatorEngine([], java_bin="missing-java")

    with pytest.raises(RelocationError, match="missing-java"):
        engine.relocate(tmp_path / "in.jar", tmp_path / "out.jar", [RULE])


def test_bootstrap_downloads_engine_libraries(tmp_path):
    class FakeDownloader:
        def __init__(self):
            self.requested = []

        def download(self, library):
            self.requested.append(library)
            path = tmp_path / Path(library.path).name
            path.write_bytes(b"jar")
            return path

    downloader = FakeDownloader()

    engine = RelocatorBootstrap(downloader, java_bin="java17")()

    assert [str(library) for library in downloader.requested] == [
        "org.ow2.asm:asm-commons:6.0",
        "org.ow2.asm:asm:6.0",
        "me.lucko:jar-relocator:1.3",
    ]
    assert all(library.has_checksum for library in ENGINE_LIBRARIES)
    assert [path.name for path in engine.classpath] == ["asm-commons-6.0.jar", "asm-6.0.jar", "jar-relocator-1.3.jar"]
    assert engine.java_bin == "java17"
