"""Version-addressed extraction cache for package archives.

Each resolved ``(name, version)`` maps to one directory under the cache root.
A directory that exists is treated as complete; nothing here re-verifies or
evicts entries.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import shutil
import tarfile
import zlib
from pathlib import Path
from typing import Optional, Union

import requests
from platformdirs import user_cache_dir

from constants import Constants
from common.http_client import safe_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from errors import ArchiveFetchError, DecompressionError, ExtractionError
from versioning.models import ResolvedPackage

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def default_cache_root() -> Path:
    """Platform user cache directory plus the fixed namespace segment."""
    return Path(user_cache_dir()) / Constants.CACHE_NAMESPACE


def _safe_cache_key(name: str) -> str:
    return name.replace("/", "_")


class PackageCache:
    """Maps resolved packages to extracted archive directories on disk."""

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.root = Path(root) if root is not None else default_cache_root()
        self.timeout = timeout

    def path_for(self, pkg: ResolvedPackage) -> Path:
        """Deterministic cache location for ``pkg``; touches nothing on disk."""
        return self.root / _safe_cache_key(pkg.name) / pkg.version

    def is_cached(self, pkg: ResolvedPackage) -> bool:
        return self.path_for(pkg).exists()

    def ensure_cached(self, pkg: ResolvedPackage, archive_url: str) -> Path:
        """Return the cache path of ``pkg``, downloading and extracting it if absent.

        Args:
            pkg: Resolved package identity.
            archive_url: Tarball URL published by the registry.

        Returns:
            Path: Directory holding the archive's ``package/`` contents.

        Raises:
            ArchiveFetchError: Download failed or returned a non-200 status.
            DecompressionError: Body is not gzip.
            ExtractionError: Tar stream unreadable or an entry could not be written.
        """
        cache_path = self.path_for(pkg)
        if cache_path.exists():
            if is_debug_enabled(logger):
                logger.debug(
                    "Cache hit",
                    extra=extra_context(
                        event="cache_hit",
                        component="cache",
                        action="ensure_cached",
                        package=str(pkg),
                        target=str(cache_path)
                    )
                )
            return cache_path

        logger.info("Downloading %s...", safe_url(archive_url))
        with Timer() as timer:
            data = self._download(pkg, archive_url)
            tar_bytes = self._decompress(pkg, data)
            self._extract(pkg, tar_bytes, cache_path)

        if is_debug_enabled(logger):
            logger.debug(
                "Archive extracted",
                extra=extra_context(
                    event="cache_fill",
                    component="cache",
                    action="extract",
                    outcome="success",
                    package=str(pkg),
                    duration_ms=timer.duration_ms(),
                    target=str(cache_path)
                )
            )
        return cache_path

    def _download(self, pkg: ResolvedPackage, archive_url: str) -> bytes:
        try:
            res = safe_get(archive_url, context="archive", timeout=self.timeout)
        except requests.RequestException as exc:
            raise ArchiveFetchError(f"download {pkg}: {exc}") from exc
        if res.status_code != 200:
            raise ArchiveFetchError(
                f"download {pkg}: unexpected status code {res.status_code}"
            )
        return res.content

    @staticmethod
    def _decompress(pkg: ResolvedPackage, data: bytes) -> bytes:
        if not data.startswith(_GZIP_MAGIC):
            raise DecompressionError(f"gzip reader for {pkg}: not a gzipped file")
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecompressionError(f"gzip reader for {pkg}: {exc}") from exc

    def _extract(self, pkg: ResolvedPackage, tar_bytes: bytes, dest: Path) -> None:
        """Extract ``package/``-rooted entries of the tar stream into ``dest``.

        Partially extracted content is left in place on failure.
        """
        prefix = Constants.ARCHIVE_ROOT_PREFIX
        try:
            with tarfile.open(fileobj=io.BytesIO(tar_bytes), mode="r:") as tar:
                dest.mkdir(parents=True, exist_ok=True)
                for member in tar:
                    if not member.name.startswith(prefix):
                        continue
                    target = _member_target(dest, member.name[len(prefix):])
                    if member.isdir():
                        os.makedirs(target, mode=member.mode, exist_ok=True)
                    elif member.isfile():
                        _write_member(tar, member, target)
                    else:
                        logger.debug("Skipping %s entry %s", member.type, member.name)
        except tarfile.TarError as exc:
            raise ExtractionError(f"read tar for {pkg}: {exc}") from exc
        except OSError as exc:
            raise ExtractionError(f"extract {pkg}: {exc}") from exc


def _member_target(dest: Path, rel_path: str) -> Path:
    """Join ``rel_path`` onto ``dest``, refusing paths that escape it."""
    root = os.path.abspath(dest)
    target = os.path.abspath(os.path.join(root, rel_path))
    if target != root and not target.startswith(root + os.sep):
        raise ExtractionError(f"unsafe tar member path: {rel_path}")
    return Path(target)


def _write_member(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    source = tar.extractfile(member)
    if source is None:
        raise ExtractionError(f"no data for tar entry {member.name}")
    with source, open(target, "wb") as out:
        shutil.copyfileobj(source, out)
