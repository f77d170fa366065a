"""NPM registry client: package metadata (packument) retrieval and decoding."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.http_client import safe_get
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url
from errors import MetadataDecodeError, MetadataFetchError, UnexpectedStatus
from versioning.models import RegistryMetadata, VersionInfo

logger = logging.getLogger(__name__)


def encode_package_name(name: str) -> str:
    """Return the request path segment for ``name``.

    Scoped names keep the leading '@' but percent-encode the scope separator
    (``@scope/pkg`` -> ``@scope%2Fpkg``); unscoped names are used unmodified.
    """
    if name.startswith("@"):
        return name.replace("/", "%2F")
    return name


def metadata_url(name: str, registry_url: str = Constants.REGISTRY_URL_NPM) -> str:
    """Build the packument URL for ``name`` under ``registry_url``."""
    return registry_url.rstrip("/") + "/" + encode_package_name(name)


def _decode_dependencies(name: str, version: str, raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MetadataDecodeError(
            f"decode metadata for {name}: dependencies of {version} is not an object"
        )
    return {str(dep): str(selector) for dep, selector in raw.items()}


def decode_metadata(name: str, payload: Any) -> RegistryMetadata:
    """Convert a decoded packument JSON document into RegistryMetadata.

    Missing ``dist-tags`` or ``versions`` sections decode as empty mappings;
    sections of the wrong type are rejected.

    Raises:
        MetadataDecodeError: If the document is not shaped like a packument.
    """
    if not isinstance(payload, dict):
        raise MetadataDecodeError(f"decode metadata for {name}: expected a JSON object")

    dist_tags = payload.get("dist-tags") or {}
    versions = payload.get("versions") or {}
    if not isinstance(dist_tags, dict) or not isinstance(versions, dict):
        raise MetadataDecodeError(
            f"decode metadata for {name}: 'dist-tags' and 'versions' must be objects"
        )

    decoded: Dict[str, VersionInfo] = {}
    for version, info in versions.items():
        if not isinstance(info, dict):
            raise MetadataDecodeError(
                f"decode metadata for {name}: entry for {version} is not an object"
            )
        dist = info.get("dist") or {}
        if not isinstance(dist, dict):
            raise MetadataDecodeError(
                f"decode metadata for {name}: dist of {version} is not an object"
            )
        decoded[str(version)] = VersionInfo(
            archive_url=str(dist.get("tarball") or ""),
            dependencies=_decode_dependencies(name, version, info.get("dependencies")),
        )

    return RegistryMetadata(
        name=name,
        dist_tags={str(tag): str(target) for tag, target in dist_tags.items()},
        versions=decoded,
    )


def fetch_metadata(
    name: str,
    *,
    registry_url: str = Constants.REGISTRY_URL_NPM,
    timeout: Optional[float] = None,
) -> RegistryMetadata:
    """Get the metadata document of a package from the NPM registry.

    Args:
        name: Package name, optionally scoped.
        registry_url: Registry base URL.
        timeout: Request timeout in seconds.

    Returns:
        RegistryMetadata: Freshly fetched document; never cached.

    Raises:
        MetadataFetchError: On transport failure.
        UnexpectedStatus: If the registry does not answer 200.
        MetadataDecodeError: If the body is not a packument.
    """
    package_url = metadata_url(name, registry_url)
    headers = {"Accept": Constants.METADATA_ACCEPT}

    with Timer() as timer:
        try:
            res = safe_get(package_url, context="metadata", timeout=timeout, headers=headers)
        except requests.RequestException as exc:
            logger.error(
                "HTTP error",
                exc_info=is_debug_enabled(logger),
                extra=extra_context(
                    event="http_error",
                    outcome="exception",
                    target=safe_url(package_url),
                    package=name
                )
            )
            raise MetadataFetchError(f"fetch metadata for {name}: {exc}") from exc

    if res.status_code != 200:
        logger.warning(
            "HTTP non-200 from registry",
            extra=extra_context(
                event="http_response",
                outcome="unexpected_status",
                status_code=res.status_code,
                duration_ms=timer.duration_ms(),
                target=safe_url(package_url),
                package=name
            )
        )
        raise UnexpectedStatus(res.status_code, safe_url(package_url))

    try:
        payload = json.loads(res.text)
    except json.JSONDecodeError as exc:
        raise MetadataDecodeError(f"decode metadata for {name}: {exc}") from exc

    metadata = decode_metadata(name, payload)
    if is_debug_enabled(logger):
        logger.debug(
            "Decoded metadata",
            extra=extra_context(
                event="parse",
                component="client",
                action="decode_metadata",
                outcome="success",
                package=name,
                version_count=len(metadata.versions),
                tag_count=len(metadata.dist_tags)
            )
        )
    return metadata
