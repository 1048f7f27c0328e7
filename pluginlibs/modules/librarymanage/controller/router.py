"""FastAPI routes exposing the library manager."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from pluginlibs.modules.librarymanage.domain import (
    DownloadFailedError,
    Library,
    LibraryError,
    MalformedUrlError,
    Relocation,
    UnresolvableLibraryError,
)
from pluginlibs.modules.librarymanage.loader import ClasspathLoader
from pluginlibs.modules.librarymanage.service.manager import LibraryManager

router = APIRouter(prefix="/libraries", tags=["libraries"])


class RelocationPayload(BaseModel):
    pattern: str
    relocated_pattern: str = Field(..., alias="relocatedPattern")
    includes: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class LibraryPayload(BaseModel):
    group_id: str = Field(..., alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    version: str
    classifier: Optional[str] = None
    checksum: Optional[str] = Field(None, description="Base64 encoded SHA-256")
    urls: List[str] = Field(default_factory=list)
    relocations: List[RelocationPayload] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def to_library(self) -> Library:
        builder = (
            Library.builder()
            .group_id(self.group_id)
            .artifact_id(self.artifact_id)
            .version(self.version)
            .urls(self.urls)
        )
        if self.classifier:
            builder.classifier(self.classifier)
        if self.checksum:
            builder.checksum(self.checksum)
        for item in self.relocations:
            builder.relocate(Relocation.of(item.pattern, item.relocated_pattern, item.includes, item.excludes))
        return builder.build()


class RepositoryPayload(BaseModel):
    url: str


def get_manager(request: Request) -> LibraryManager:
    container = getattr(request.app.state, "container", None)
    if not container or not getattr(container, "library_manager", None):
        raise HTTPException(status_code=500, detail="Library manager not initialized.")
    return container.library_manager


def _library(payload: LibraryPayload) -> Library:
    try:
        return payload.to_library()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _failure(exc: LibraryError) -> HTTPException:
    if isinstance(exc, (UnresolvableLibraryError, MalformedUrlError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, DownloadFailedError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.get("/repositories")
async def list_repositories(manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    return {"repositories": manager.repositories}


@router.post("/repositories")
async def add_repository(payload: RepositoryPayload, manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    try:
        repository = manager.add_repository(payload.url)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"repository": repository, "repositories": manager.repositories}


@router.post("/resolve")
async def resolve_library(payload: LibraryPayload, manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    library = _library(payload)
    return {"library": str(library), "path": library.path, "urls": manager.resolve_library(library)}


@router.post("/download")
def download_library(payload: LibraryPayload, manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    library = _library(payload)
    try:
        path = manager.download_library(library)
    except LibraryError as exc:
        raise _failure(exc) from exc
    return {"library": str(library), "filePath": str(path)}


@router.post("/load")
def load_library(payload: LibraryPayload, manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    library = _library(payload)
    try:
        path = manager.load_library(library)
    except LibraryError as exc:
        raise _failure(exc) from exc
    return {"library": str(library), "filePath": str(path)}


@router.get("/classpath")
async def classpath(manager: LibraryManager = Depends(get_manager)) -> Dict[str, Any]:
    loader = manager.loader
    body: Dict[str, Any] = {"classpath": [str(path) for path in getattr(loader, "paths", [])]}
    if isinstance(loader, ClasspathLoader):
        body["argument"] = loader.as_argument()
    return body
