"""Base class for version resolvers."""

from abc import ABC, abstractmethod
import logging

from common.logging_utils import extra_context, is_debug_enabled

from ..models import PackageSpecifier, RegistryMetadata, Resolution

logger = logging.getLogger(__name__)


class VersionResolver(ABC):
    """Turns a PackageSpecifier into a concrete Resolution.

    Subclasses supply the metadata source and the selection rules;
    ``resolve`` ties the two together.
    """

    @abstractmethod
    def fetch_metadata(self, spec: PackageSpecifier) -> RegistryMetadata:
        """Fetch the registry document for ``spec.name``."""

    @abstractmethod
    def pick(self, spec: PackageSpecifier, metadata: RegistryMetadata) -> Resolution:
        """Select one version of ``metadata`` for ``spec.selector``."""

    def resolve(self, spec: PackageSpecifier) -> Resolution:
        """Fetch fresh metadata and pick the version for ``spec``."""
        metadata = self.fetch_metadata(spec)
        resolution = self.pick(spec, metadata)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved specifier",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="resolve",
                    outcome=resolution.mode.value,
                    package=spec.name,
                    selector=spec.selector,
                    version=resolution.version
                )
            )
        return resolution
