# src/main.py - v1
"""CLI entry point: fingerprint, check and lookup commands.

Usage:
    imgup fingerprint <file>
    imgup check <file> [--service flickr|smugmug]
    imgup lookup (--filename NAME | --service S --remote-id ID)

These commands only touch the local upload cache. Uploading needs an
authenticated HTTP client and goes through imgup.api.facade.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from imgup.version import __version__

if TYPE_CHECKING:
    from imgup.config.settings import Settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_MATCH = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_ERROR

    from imgup.config.settings import ConfigurationError, load_settings
    from imgup.core.errors import ImgupError

    try:
        settings = load_settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except ImgupError as exc:
        logger.error("%s", exc, exc_info=args.verbose)
        return EXIT_ERROR


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="imgup",
        description=f"imgup v{__version__} - duplicate-aware photo uploads",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    _add_output_options(parser, default=False)

    # Accepted after the command too; SUPPRESS keeps a flag given before it.
    common = argparse.ArgumentParser(add_help=False)
    _add_output_options(common, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command")

    # --- fingerprint ---
    p_fp = subparsers.add_parser(
        "fingerprint", parents=[common], help="Print the MD5 fingerprint of a file",
    )
    p_fp.add_argument("file", type=Path, help="Path to image")
    p_fp.set_defaults(func=_cmd_fingerprint)

    # --- check ---
    p_check = subparsers.add_parser(
        "check", parents=[common], help="Check the local upload cache for a file",
    )
    p_check.add_argument("file", type=Path, help="Path to image")
    p_check.add_argument(
        "--service", choices=["flickr", "smugmug"], default=None,
        help="Service to check (default: configured default service)",
    )
    p_check.set_defaults(func=_cmd_check)

    # --- lookup ---
    p_lookup = subparsers.add_parser(
        "lookup", parents=[common], help="Query the upload cache",
    )
    group = p_lookup.add_mutually_exclusive_group(required=True)
    group.add_argument("--filename", default=None, help="Exact filename")
    group.add_argument("--remote-id", default=None, help="Remote identifier")
    p_lookup.add_argument(
        "--service", choices=["flickr", "smugmug"], default=None,
        help="Service of --remote-id (default: configured default service)",
    )
    p_lookup.set_defaults(func=_cmd_lookup)

    return parser


def _add_output_options(parser: argparse.ArgumentParser, default: object) -> None:
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=default,
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", default=default,
        help="Print results as JSON",
    )


async def _cmd_fingerprint(args: argparse.Namespace, settings: Settings) -> int:
    """Print file fingerprint."""
    from imgup.cache.fingerprint import get_file_info

    info = get_file_info(args.file)
    if args.as_json:
        print(info.model_dump_json(indent=2))
    else:
        print(f"{info.fingerprint}  {info.filename} ({info.size_bytes} bytes)")
    return EXIT_OK


async def _cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    """Local-cache-only duplicate check."""
    from imgup.cache.cache_factory import create_cache_store
    from imgup.duplicate.checker import DuplicateChecker

    service = args.service or settings.default_service
    store = create_cache_store(settings)
    try:
        checker = DuplicateChecker(cache_store=store, service=service)
        found = await checker.check(args.file)
    finally:
        store.close()

    if found is None:
        _print({"duplicate": False, "file": str(args.file)}, args.as_json,
               f"{args.file.name}: not uploaded")
        return EXIT_NO_MATCH

    _print(
        {"duplicate": True, **found.model_dump(mode="json")}, args.as_json,
        f"{args.file.name}: already on {found.service} as {found.remote_id}\n"
        f"  URL:   {found.remote_url}\n"
        f"  Image: {found.image_url}",
    )
    return EXIT_OK


async def _cmd_lookup(args: argparse.Namespace, settings: Settings) -> int:
    """Query the cache by filename or remote id."""
    from imgup.cache.cache_factory import create_cache_store

    store = create_cache_store(settings)
    try:
        if args.filename:
            records = await store.find_by_filename(args.filename)
        else:
            service = args.service or settings.default_service
            record = await store.find_by_remote_id(service, args.remote_id)
            records = [record] if record else []
    finally:
        store.close()

    if not records:
        _print([], args.as_json, "No matching uploads")
        return EXIT_NO_MATCH

    if args.as_json:
        print(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
    else:
        for r in records:
            print(
                f"{r.upload_time:%Y-%m-%d %H:%M}  {r.service:8s} {r.remote_id:12s} "
                f"{r.filename}  {r.remote_url}"
            )
    return EXIT_OK


def _print(payload: object, as_json: bool, text: str) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(text)


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from imgup.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
