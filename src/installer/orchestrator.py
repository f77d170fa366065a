"""Recursive install walk: resolve, cache, link, then recurse into dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from errors import GooseError, InstallError
from versioning.models import PackageSpecifier, ResolvedPackage
from versioning.resolvers.base import VersionResolver

from .cache import PackageCache
from .linker import FlatLinker

logger = logging.getLogger(__name__)


@dataclass
class InstallContext:
    """Memo state for one CLI invocation, shared by every top-level argument.

    ``requested`` holds (name, selector) pairs as asked for; ``resolved`` holds
    the concrete identities already linked or in progress. Both are marked
    before the work they guard, so a failure leaves them marked.
    """

    requested: Set[Tuple[str, str]] = field(default_factory=set)
    resolved: Set[ResolvedPackage] = field(default_factory=set)
    linked: List[ResolvedPackage] = field(default_factory=list)

    def claim_request(self, spec: PackageSpecifier) -> bool:
        """Mark ``spec`` as requested; False if it already was."""
        key = (spec.name, spec.selector)
        if key in self.requested:
            return False
        self.requested.add(key)
        return True

    def claim_package(self, pkg: ResolvedPackage) -> bool:
        """Mark ``pkg`` as being installed; False if it already was."""
        if pkg in self.resolved:
            return False
        self.resolved.add(pkg)
        return True


class Installer:
    """Drives the dependency graph walk for one registry, cache and install root."""

    def __init__(self, resolver: VersionResolver, cache: PackageCache, linker: FlatLinker):
        self.resolver = resolver
        self.cache = cache
        self.linker = linker

    def install(self, spec: PackageSpecifier, context: InstallContext) -> List[ResolvedPackage]:
        """Install ``spec`` and, recursively, its dependencies.

        Args:
            spec: Requested package and selector.
            context: Memo state owned by the caller for the whole run.

        Returns:
            Packages newly linked by this call, in link order.

        Raises:
            InstallError: Wrapping the first failure in this subtree.
        """
        if not context.claim_request(spec):
            if is_debug_enabled(logger):
                logger.debug(
                    "Specifier already requested",
                    extra=extra_context(
                        event="decision",
                        component="installer",
                        action="install",
                        outcome="skip_requested",
                        package=str(spec)
                    )
                )
            return []

        logger.info("Resolving %s...", spec)
        try:
            resolution = self.resolver.resolve(spec)
        except GooseError as exc:
            raise InstallError(spec.name, spec.selector, exc) from exc

        pkg = resolution.package
        if not context.claim_package(pkg):
            # no fetch or recursion, but the install root still follows the latest request
            logger.debug("%s already installed in this run, relinking", pkg)
            cache_path = self.cache.path_for(pkg)
            if cache_path.exists():
                try:
                    self.linker.link(pkg.name, cache_path)
                except GooseError as exc:
                    raise InstallError(spec.name, spec.selector, exc) from exc
            return []

        try:
            cache_path = self.cache.ensure_cached(pkg, resolution.archive_url)
            self.linker.link(pkg.name, cache_path)
        except GooseError as exc:
            raise InstallError(spec.name, spec.selector, exc) from exc

        context.linked.append(pkg)
        logger.info("Linked %s", pkg)
        installed = [pkg]

        for dep_name, dep_selector in resolution.dependencies.items():
            dep = PackageSpecifier(name=dep_name, selector=dep_selector)
            try:
                installed.extend(self.install(dep, context))
            except InstallError as exc:
                raise InstallError(spec.name, spec.selector, exc) from exc
        return installed
