"""Exception hierarchy for specifier parsing, resolution, caching and linking.

Every failure the installer can report derives from ``GooseError`` so the CLI
boundary can catch one type per argument. Lower layers raise the most specific
subclass and chain the underlying cause with ``raise ... from exc``.
"""

from __future__ import annotations

from typing import Optional


class GooseError(Exception):
    """Base class for all installer errors."""


# Specifier parsing


class ParseError(GooseError, ValueError):
    """Raised when a raw specifier token is malformed."""


class EmptyInput(ParseError):
    """The specifier token is empty."""


class EmptyName(ParseError):
    """Nothing precedes the '@' of an unscoped versioned specifier."""


class InvalidScopedSpecifier(ParseError):
    """A scoped specifier with a version suffix has no name part."""


class InvalidScopedName(ParseError):
    """A scoped name without a version lacks the scope/name separator."""


class ContainsWhitespace(ParseError):
    """An unscoped bare name contains a space."""


# Registry communication


class RegistryError(GooseError):
    """Raised when package metadata cannot be obtained from the registry."""


class MetadataFetchError(RegistryError):
    """Transport failure while requesting package metadata."""


class UnexpectedStatus(RegistryError):
    """The registry answered with a non-success status code."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"unexpected status code {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class MetadataDecodeError(RegistryError):
    """The metadata payload is not valid JSON or has the wrong shape."""


# Version resolution


class ResolutionError(GooseError):
    """Raised when a selector cannot be resolved to a published version."""


class InvalidConstraint(ResolutionError):
    """The selector is neither a known version, a dist-tag nor a valid range."""


class NoMatchingVersion(ResolutionError):
    """No published version satisfies the range."""


# Cache population


class CacheError(GooseError):
    """Raised when a package archive cannot be placed in the cache."""


class ArchiveFetchError(CacheError):
    """Transport failure or bad status while downloading an archive."""


class DecompressionError(CacheError):
    """The archive body is not a valid gzip stream."""


class ExtractionError(CacheError):
    """Reading the tar stream or writing an entry to disk failed."""


# Install root


class LinkError(GooseError, OSError):
    """Creating the install-root link or its parent directory failed."""


class InstallError(GooseError):
    """Wraps a failure with the package specifier being installed."""

    def __init__(self, name: str, selector: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"install {name}@{selector}{detail}")
        self.name = name
        self.selector = selector
        self.cause = cause
