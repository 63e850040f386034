#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for jpgfs.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import CACHE_DIR_ENV, DEFAULT_WORKERS, JPEG_QUALITY, MAX_DIMENSION, default_cache_dir
from .errors import MountError
from .models.mount_config import MountConfig


def setup_logging(verbose: bool, debug: bool = False):
    """Configure logging for the CLI tool."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    # Per-operation FUSE trace is only wanted with --debug
    logging.getLogger("fuse.log-mixin").setLevel(logging.DEBUG if debug else logging.WARNING)
    logging.debug("Verbose logging enabled (DEBUG level).")


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="jpgfs",
        description="Mount a read-only mirror of SOURCE at MOUNTPOINT with JPEGs downsized.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""Examples:
  # Mirror a photo library with JPEGs capped at {MAX_DIMENSION}px
  %(prog)s /mnt/photos /mnt/photos-small

  # Use a dedicated cache and show build progress
  %(prog)s /mnt/photos /mnt/photos-small --cache-dir /var/cache/jpgfs --progress

The cache directory defaults to ${CACHE_DIR_ENV} or ~/.cache/jpgfs.
        """
    )
    parser.add_argument("source", metavar="SOURCE",
                        help="Source directory to mirror")
    parser.add_argument("mountpoint", metavar="MOUNTPOINT",
                        help="Directory to mount the filesystem on")

    parser.add_argument("--cache-dir", type=Path, default=None,
                        help="Directory for transcoded JPEGs (default: $%s or ~/.cache/jpgfs)" % CACHE_DIR_ENV)
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS,
                        help=f"Number of worker threads (default: {DEFAULT_WORKERS})")
    parser.add_argument("--max-dimension", type=int, default=MAX_DIMENSION,
                        help=f"Cap for the larger image side in pixels (default: {MAX_DIMENSION})")
    parser.add_argument("--quality", type=int, default=JPEG_QUALITY,
                        help=f"JPEG quality for transcoded images (default: {JPEG_QUALITY})")
    parser.add_argument("--fallback-original", action="store_true",
                        help="Serve the original file when a JPEG cannot be transcoded instead of hiding it")
    parser.add_argument("--background", action="store_true",
                        help="Daemonize after mounting")
    parser.add_argument("--allow-other", action="store_true",
                        help="Allow other users to access the mount")
    parser.add_argument("--progress", action="store_true",
                        help="Show a progress bar while building the tree")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose (DEBUG) output")
    parser.add_argument("--debug", action="store_true",
                        help="Log every FUSE operation")
    return parser


def build_config(args, parser) -> MountConfig:
    """Validate parsed arguments and turn them into a MountConfig."""
    source = Path(args.source)
    if not source.is_dir():
        parser.error(f"SOURCE {args.source} is not a directory")
    try:
        return MountConfig(
            source=source.resolve(),
            mountpoint=Path(args.mountpoint),
            cache_dir=args.cache_dir or default_cache_dir(),
            workers=args.workers,
            max_dimension=args.max_dimension,
            quality=args.quality,
            fallback_to_original=args.fallback_original,
            foreground=not args.background,
            allow_other=args.allow_other,
            progress=args.progress,
            debug=args.debug,
        )
    except ValueError as e:
        parser.error(str(e))


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.debug)
    logging.debug("Parsed arguments: %s", args)

    config = build_config(args, parser)
    logging.info("Using cache: %s", config.cache_dir)

    # Imported here so --help works without libfuse installed
    from .fs.mount import mount

    try:
        mount(config)
    except MountError as e:
        logging.error("Mount failed: %s", e, exc_info=args.verbose)
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation interrupted by user.")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
