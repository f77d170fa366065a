"""Package installation: extraction cache, install-root linking and the graph walk."""

from .cache import PackageCache, default_cache_root
from .linker import FlatLinker
from .orchestrator import InstallContext, Installer

__all__ = [
    "FlatLinker",
    "InstallContext",
    "Installer",
    "PackageCache",
    "default_cache_root",
]
