"""NPM version resolver using semantic versioning."""

import logging
import re
from typing import List, Optional, Tuple

import semantic_version

from constants import Constants
from errors import InvalidConstraint, NoMatchingVersion
from registry.npm.client import fetch_metadata
from ..models import PackageSpecifier, RegistryMetadata, Resolution, ResolutionMode, ResolvedPackage
from .base import VersionResolver

logger = logging.getLogger(__name__)

_COMMA_SPLIT = re.compile(r"\s*,\s*")


class NpmVersionResolver(VersionResolver):
    """Resolver for NPM packages: dist-tags, exact versions, then semver ranges."""

    def __init__(
        self,
        registry_url: str = Constants.REGISTRY_URL_NPM,
        timeout: Optional[float] = None,
    ):
        """Initialize the resolver.

        Args:
            registry_url: Registry base URL used for metadata requests.
            timeout: Request timeout in seconds.
        """
        self.registry_url = registry_url
        self.timeout = timeout

    def fetch_metadata(self, spec: PackageSpecifier) -> RegistryMetadata:
        """Fetch the packument for ``spec.name``; always goes to the network."""
        return fetch_metadata(spec.name, registry_url=self.registry_url, timeout=self.timeout)

    def pick(self, spec: PackageSpecifier, metadata: RegistryMetadata) -> Resolution:
        """Apply dist-tag, exact and range rules to select a version.

        Args:
            spec: Requested package and selector.
            metadata: Registry document for the package.

        Returns:
            Resolution for the selected version.

        Raises:
            InvalidConstraint: If the selector is not a valid range.
            NoMatchingVersion: If no published version satisfies the range.
        """
        selector = spec.selector
        mode = ResolutionMode.EXACT
        if selector in metadata.dist_tags:
            selector = metadata.dist_tags[selector]
            mode = ResolutionMode.TAG

        if selector in metadata.versions:
            return self._resolution(spec.name, selector, metadata, mode)

        constraint = self._parse_constraint(selector)
        matched = self._pick_range(constraint, list(metadata.versions))
        if matched is None:
            raise NoMatchingVersion(
                f"no matching version found for {spec.name}@{spec.selector}"
            )
        return self._resolution(spec.name, matched, metadata, ResolutionMode.RANGE)

    @staticmethod
    def _resolution(
        name: str, version: str, metadata: RegistryMetadata, mode: ResolutionMode
    ) -> Resolution:
        info = metadata.versions[version]
        return Resolution(
            package=ResolvedPackage(name=name, version=version),
            archive_url=info.archive_url,
            dependencies=dict(info.dependencies),
            mode=mode,
        )

    def _normalize_spec(self, spec_str: str) -> str:
        """Normalize comma-separated comparator lists into SimpleSpec form.

        ">= 1.2, < 2.0.0" becomes ">=1.2,<2.0.0"; SimpleSpec rejects the
        whitespace npm tolerates.
        """
        parts = _COMMA_SPLIT.split(spec_str.strip())
        return ",".join(part.replace(" ", "") for part in parts)

    def _parse_constraint(self, spec_str: str) -> semantic_version.base.BaseSpec:
        """Parse ``spec_str`` as an npm range, falling back to SimpleSpec syntax."""
        # NpmSpec understands ^, ~, hyphen ranges, x-ranges and ||
        try:
            return semantic_version.NpmSpec(spec_str)
        except ValueError:
            try:
                return semantic_version.SimpleSpec(self._normalize_spec(spec_str))
            except ValueError as exc:
                raise InvalidConstraint(
                    f"invalid version constraint {spec_str!r}: {exc}"
                ) from exc

    def _pick_range(
        self, constraint: semantic_version.base.BaseSpec, candidates: List[str]
    ) -> Optional[str]:
        """Return the highest candidate key satisfying ``constraint``, or None."""
        best: Optional[Tuple[semantic_version.Version, str]] = None
        skipped = 0
        for raw in candidates:
            try:
                ver = semantic_version.Version(raw)
            except ValueError:
                skipped += 1
                continue  # registries may list legacy, non-semver keys
            if not constraint.match(ver):
                continue
            if best is None or ver > best[0]:
                best = (ver, raw)

        if skipped:
            logger.debug("Skipped %d non-semver version keys", skipped)
        return best[1] if best else None
