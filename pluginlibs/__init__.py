"""Runtime library resolution, caching and relocation for plugins."""

__version__ = "1.0.0"
