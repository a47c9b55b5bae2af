"""
Entry point for running gpup as a module.

Usage:
    python -m gpup PHOTO.jpg DIRECTORY...
    python -m gpup --new-album "Summer 2024" ~/Pictures/summer
"""

import argparse
import logging
import sys
from pathlib import Path

from gpup.config import Settings
from gpup.exceptions import GpupError
from gpup.uploader import run

SETUP_HELP = """\
Setup:
  1. Open https://console.cloud.google.com/apis/library/photoslibrary.googleapis.com/
  2. Enable Photos Library API.
  3. Open https://console.cloud.google.com/apis/credentials
  4. Create an OAuth client ID where the application type is Desktop app.
  5. Export GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET variables or set the options.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gpup",
        usage="%(prog)s [OPTIONS] FILE or DIRECTORY...",
        description="Upload files to Google Photos",
        epilog=SETUP_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="*", type=Path, help=argparse.SUPPRESS)
    parser.add_argument(
        "--new-album",
        "-n",
        metavar="TITLE",
        help="Create an album and add files into it",
    )
    parser.add_argument(
        "--oauth-method",
        choices=["browser", "cli"],
        help="OAuth authorization method (default: browser)",
    )
    parser.add_argument(
        "--google-client-id",
        metavar="ID",
        help="Google API client ID (env: GOOGLE_CLIENT_ID)",
    )
    parser.add_argument(
        "--google-client-secret",
        metavar="SECRET",
        help="Google API client secret (env: GOOGLE_CLIENT_SECRET)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        help="Number of files uploaded concurrently (default: 4)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Optional YAML file with the same settings",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from options, falling back to the YAML file and environment."""
    options = {
        "google_client_id": args.google_client_id,
        "google_client_secret": args.google_client_secret,
        "oauth_method": args.oauth_method,
        "new_album": args.new_album,
        "upload_workers": args.workers,
        "log_level": args.log_level,
    }
    overrides = {k: v for k, v in options.items() if v is not None}
    if args.config:
        return Settings.from_yaml(args.config, **overrides)
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.paths:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        report = run(settings, args.paths)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except (GpupError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1

    if not report.success:
        logger.error(f"{report.failed} of {len(report.results)} files could not be added")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
