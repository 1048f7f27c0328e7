"""Library manage module exports."""

from .service.manager import LibraryManager
from .controller import router as library_router

__all__ = ["LibraryManager", "library_router"]
