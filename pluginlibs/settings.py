"""Runtime configuration for the plugin library service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


class Settings(BaseSettings):
    """Configuration values mapped from ``PLUGINLIBS_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="PLUGINLIBS_", env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Plugin Libraries API"
    version: str = __version__

    # Libraries are cached below <data_dir>/lib
    data_dir: Path = Path("data")

    # Repositories, tried in this order after the presets
    repositories: List[str] = Field(default_factory=list)
    maven_central: bool = True
    maven_local: bool = False
    sonatype: bool = False
    jcenter: bool = False
    jitpack: bool = False

    connect_timeout: float = 5.0
    read_timeout: float = 5.0

    # Relocation engine
    java_bin: str = "java"
    relocation_timeout: Optional[float] = None
    preload_relocator: bool = False

    # group:artifact:version[:classifier] loaded on startup
    preload_libraries: List[str] = Field(default_factory=list)

    log_level: str = "INFO"

    def enabled_presets(self) -> List[str]:
        names = ("maven_central", "maven_local", "sonatype", "jcenter", "jitpack")
        return [name for name in names if getattr(self, name)]


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance for dependency injection."""
    return Settings()
