"""Token parsing utilities for package specifiers."""

from constants import Constants
from errors import (
    ContainsWhitespace,
    EmptyInput,
    EmptyName,
    InvalidScopedName,
    InvalidScopedSpecifier,
)

from .models import PackageSpecifier


def parse_specifier(raw: str) -> PackageSpecifier:
    """Parse a CLI token into a PackageSpecifier.

    Accepted forms are ``name``, ``name@selector``, ``@scope/name`` and
    ``@scope/name@selector``. A missing selector means "latest".

    Args:
        raw: Token exactly as given on the command line.

    Returns:
        PackageSpecifier with the name and raw selector.

    Raises:
        ParseError: One of its subclasses describing the malformation.
    """
    if raw == "":
        raise EmptyInput("package name cannot be empty")

    if "@" in raw and not raw.startswith("@"):
        name, selector = raw.split("@", 1)
        if name == "":
            raise EmptyName("package name cannot be empty before '@'")
        return PackageSpecifier(name=name, selector=selector)

    if raw.startswith("@"):
        at = raw.rfind("@")
        if at > 0:
            name = raw[:at]
            if name == "":
                raise InvalidScopedSpecifier(f"invalid scoped package: {raw!r}")
            return PackageSpecifier(name=name, selector=raw[at + 1:])
        if "/" not in raw:
            raise InvalidScopedName(f"invalid scoped package name: {raw!r}")
        return PackageSpecifier(name=raw, selector=Constants.DEFAULT_SELECTOR)

    if " " in raw:
        raise ContainsWhitespace("package name cannot contain spaces")

    return PackageSpecifier(name=raw, selector=Constants.DEFAULT_SELECTOR)
