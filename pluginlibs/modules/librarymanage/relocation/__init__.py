from .coordinator import RelocationCoordinator
from .engine import ENGINE_LIBRARIES, JarRelocatorEngine, RelocatorBootstrap, Relocator

__all__ = [
    "ENGINE_LIBRARIES",
    "JarRelocatorEngine",
    "RelocationCoordinator",
    "RelocatorBootstrap",
    "Relocator",
]
