"""goose - minimal npm-style package installer

Resolves each package specifier against the registry, extracts the archive
into a shared version-addressed cache, links it into the install root and
installs its dependencies.
"""
import logging
import sys

from args import parse_args
from cli_config import InstallConfig
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from errors import GooseError
from installer import FlatLinker, InstallContext, Installer, PackageCache
from versioning.parser import parse_specifier
from versioning.resolvers.npm import NpmVersionResolver

logger = logging.getLogger(__name__)

USAGE = f"Usage: {Constants.PROG} <package[@version]> [...]"


def _setup_logging(args):
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    configure_logging(getattr(args, "LOG_LEVEL", None))

    # Add file handler if --logfile specified
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def build_installer(config):
    """Wire resolver, cache and linker from an InstallConfig.

    Args:
        config (InstallConfig): Run settings.

    Returns:
        Installer: Ready to install specifiers.
    """
    resolver = NpmVersionResolver(registry_url=config.registry_url, timeout=config.timeout)
    cache = PackageCache(config.cache_dir, timeout=config.timeout)
    linker = FlatLinker(config.install_root)
    return Installer(resolver, cache, linker)


def install_all(raw_specs, installer, context=None):
    """Parse and install every raw specifier independently.

    Failures are printed with the offending argument and never stop the
    remaining arguments.

    Args:
        raw_specs (list): Tokens as given on the command line.
        installer (Installer): Engine performing the installs.
        context (InstallContext, optional): Memo state; a fresh one by default.

    Returns:
        list: Raw tokens that failed to parse or install.
    """
    context = context if context is not None else InstallContext()
    failed = []
    for raw in raw_specs:
        try:
            spec = parse_specifier(raw)
        except GooseError as e:
            print(f"Error parsing package '{raw}': {e}")
            failed.append(raw)
            continue

        try:
            installer.install(spec, context)
        except GooseError as e:
            print(f"Error installing package '{spec.name}': {e}")
            logger.debug("Install of %s failed", raw, exc_info=True)
            failed.append(raw)

    if is_debug_enabled(logger):
        logger.debug(
            "Install run finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="install_all",
                outcome="partial_failure" if failed else "success",
                count=len(raw_specs),
                failed=len(failed),
                linked=len(context.linked)
            )
        )
    return failed


def main(argv=None):
    """Main function of the program.

    Exits with ExitCodes.SUCCESS once arguments parse, even when packages fail.
    """
    args = parse_args(argv)
    _setup_logging(args)

    if not args.packages:
        print(USAGE)
        sys.exit(ExitCodes.SUCCESS.value)

    config = InstallConfig.from_args(args)
    installer = build_installer(config)
    install_all(args.packages, installer)

    print("All packages installed.")
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
