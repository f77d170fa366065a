"""Argument parsing functionality for goose."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROG,
        description="goose - minimal npm package installer",
        add_help=True,
    )

    parser.add_argument("packages",
                        metavar="package[@version]",
                        help="Package specifier: name, name@version, name@range or @scope/name@version",
                        nargs="*")

    parser.add_argument("--registry",
                        dest="REGISTRY_URL",
                        help=f"Registry base URL (default: {Constants.REGISTRY_URL_NPM})",
                        action="store",
                        type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Directory holding extracted package archives",
                        action="store",
                        type=str)
    parser.add_argument("--install-root",
                        dest="INSTALL_ROOT",
                        help=f"Directory receiving package links (default: {Constants.INSTALL_ROOT})",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help=f"HTTP request timeout in seconds (default: {Constants.REQUEST_TIMEOUT})",
                        action="store",
                        type=float)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
