"""Runtime settings for an install run.

Extracted from goose.py to keep the entrypoint slim. Values resolve with
precedence CLI flag > environment variable > Constants default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from constants import Constants
from common.logging_utils import safe_url
from installer.cache import default_cache_root

logger = logging.getLogger(__name__)


@dataclass
class InstallConfig:
    """Configuration for the installer."""

    registry_url: str = Constants.REGISTRY_URL_NPM
    cache_dir: Optional[Path] = None
    install_root: Path = Path(Constants.INSTALL_ROOT)
    timeout: float = Constants.REQUEST_TIMEOUT

    @classmethod
    def from_args(cls, args: Any, environ: Optional[Mapping[str, str]] = None) -> "InstallConfig":
        """Create config from CLI arguments and the environment.

        Args:
            args: Parsed CLI arguments namespace.
            environ: Environment mapping; defaults to os.environ.

        Returns:
            InstallConfig instance.
        """
        env = os.environ if environ is None else environ
        config = cls()

        registry = getattr(args, "REGISTRY_URL", None) or env.get(Constants.ENV_REGISTRY_URL)
        if registry:
            config.registry_url = registry

        cache_dir = getattr(args, "CACHE_DIR", None) or env.get(Constants.ENV_CACHE_DIR)
        config.cache_dir = Path(cache_dir).expanduser() if cache_dir else default_cache_root()

        if getattr(args, "INSTALL_ROOT", None):
            config.install_root = Path(args.INSTALL_ROOT)
        if getattr(args, "TIMEOUT", None) is not None:
            config.timeout = float(args.TIMEOUT)

        logger.debug(
            "Install config: registry=%s cache=%s install_root=%s timeout=%s",
            safe_url(config.registry_url),
            config.cache_dir,
            config.install_root,
            config.timeout,
        )
        return config
