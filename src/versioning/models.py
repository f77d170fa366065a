"""Data models for specifiers, registry metadata and resolved packages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ResolutionMode(Enum):
    """Which path of the resolution algorithm selected the version."""
    EXACT = "exact"
    TAG = "tag"
    RANGE = "range"


@dataclass(frozen=True)
class PackageSpecifier:
    """A package name plus the raw version selector the user asked for.

    ``selector`` is "latest", an exact version, a dist-tag, or a range.
    """
    name: str
    selector: str

    def __str__(self) -> str:
        return f"{self.name}@{self.selector}"

    @property
    def is_scoped(self) -> bool:
        """True for ``@scope/name`` packages."""
        return self.name.startswith("@")


@dataclass(frozen=True)
class ResolvedPackage:
    """A concrete (name, version) identity; unit of memoization and cache addressing."""
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class VersionInfo:
    """Per-version slice of the registry document."""
    archive_url: str
    dependencies: Dict[str, str] = field(default_factory=dict)


@dataclass
class RegistryMetadata:
    """Package document as returned by the registry (dist-tags and versions)."""
    name: str
    dist_tags: Dict[str, str] = field(default_factory=dict)
    versions: Dict[str, VersionInfo] = field(default_factory=dict)


@dataclass
class Resolution:
    """Resolution outcome consumed by the cache and the orchestrator."""
    package: ResolvedPackage
    archive_url: str
    dependencies: Dict[str, str]
    mode: ResolutionMode

    @property
    def version(self) -> str:
        """Resolved concrete version string."""
        return self.package.version
