from .store import CacheStore, StagedEntry

__all__ = ["CacheStore", "StagedEntry"]
