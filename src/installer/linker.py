"""Flat install root: one symlink per package name pointing into the cache.

The install root holds at most one entry per name. Linking a name replaces
whatever was there before, even when a sibling dependency expected another
version (last writer wins).
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Union

from constants import Constants
from errors import LinkError

logger = logging.getLogger(__name__)


class FlatLinker:
    """Creates ``<install_root>/<name>`` links for installed packages."""

    def __init__(self, install_root: Union[str, Path] = Constants.INSTALL_ROOT) -> None:
        self.install_root = Path(install_root)

    def link_path(self, name: str) -> Path:
        """Fixed install location for ``name``; scoped names nest under their scope."""
        return self.install_root / name

    def link(self, name: str, target: Path) -> Path:
        """Point the install location of ``name`` at ``target``.

        Any existing entry is removed first; failures to remove are ignored.

        Raises:
            LinkError: If the parent directory or the symlink cannot be created.
        """
        link_path = self.link_path(name)
        _remove_entry(link_path)
        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LinkError(f"create parent dir for {link_path}: {exc}") from exc
        try:
            os.symlink(os.path.abspath(target), link_path, target_is_directory=True)
        except OSError as exc:
            raise LinkError(f"symlink {target} -> {link_path}: {exc}") from exc
        return link_path


def _remove_entry(path: Path) -> None:
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
    except OSError as exc:
        logger.debug("Could not remove %s: %s", path, exc)
