import argparse
import logging
import sys
from typing import List, Optional

from .core.config_loader import ConfigLoader
from .core.env_store import EnvStore
from .core.errors import BrowserDriverManagerError
from .features.installer import BrowserDriverInstaller
from .features.queries import version, which
from .utils.logger import setup_logger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="browser-driver-manager",
        description="Keep Chrome for Testing and chromedriver installed at the same version.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  browser-driver-manager install chrome
  browser-driver-manager install chrome@126.0.6442.0 --verbose
  browser-driver-manager version
  browser-driver-manager which
""",
    )
    parser.add_argument(
        "--settings",
        help="Path to a settings JSON file (default: $BDM_SETTINGS_FILE or ~/.browser-driver-manager/settings.json)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    install_parser = subparsers.add_parser("install", help="Install a browser and its matching driver")
    install_parser.add_argument("browser", help="Browser to install, optionally with a version: chrome[@version]")
    install_parser.add_argument("-v", "--verbose", action="store_true", help="Show download progress")
    install_parser.add_argument(
        "--driver-version",
        default=None,
        help="Version spec for the driver (default: the browser's resolved build)",
    )

    subparsers.add_parser("version", help="Print the installed version")
    subparsers.add_parser("which", help="Print the recorded browser and driver locations")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config_loader = ConfigLoader(args.settings)
    verbose = bool(getattr(args, "verbose", False))
    setup_logger(config_loader, level_override="INFO" if verbose else None)

    store = EnvStore()
    try:
        if args.command == "install":
            BrowserDriverInstaller(store=store, config_loader=config_loader).install(
                args.browser, verbose=verbose, driver_version=args.driver_version
            )
        elif args.command == "version":
            version(store)
        elif args.command == "which":
            which(store)
    except BrowserDriverManagerError as e:
        logger.debug(f"{args.command} failed: {e.kind.value}", exc_info=True)
        print(str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
