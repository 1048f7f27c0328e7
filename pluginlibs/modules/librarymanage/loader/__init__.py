from .base import LibraryLoader
from .classpath import ClasspathLoader

__all__ = ["ClasspathLoader", "LibraryLoader"]
