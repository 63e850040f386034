#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for jpgfs.
"""

import os
from pathlib import Path
from typing import Set

# File type categories
JPEG_EXT: Set[str] = {".jpg", ".jpeg", ".jpe"}

# Transcode defaults (can be overridden by CLI)
MAX_DIMENSION = 2000
JPEG_QUALITY = 75
ARTIFACT_SUFFIX = ".jpg"

# Mount identity
FS_SUBTYPE = "jpgfs"
VOLUME_NAME = "jpgfs"

# Processing defaults
DEFAULT_WORKERS = os.cpu_count() or 1

# Cache location
CACHE_DIR_ENV = "JPGFS_CACHE_DIR"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "jpgfs"


def default_cache_dir() -> Path:
    """Cache root from the environment, falling back to ~/.cache/jpgfs."""
    override = os.getenv(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CACHE_DIR
