#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration for a single mount.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..config import DEFAULT_WORKERS, JPEG_QUALITY, MAX_DIMENSION, default_cache_dir


@dataclass
class MountConfig:
    """Everything needed to build the tree and mount it."""
    source: Path
    mountpoint: Path
    cache_dir: Path = field(default_factory=default_cache_dir)
    workers: int = DEFAULT_WORKERS
    max_dimension: int = MAX_DIMENSION
    quality: int = JPEG_QUALITY

    # Serve the original file when a JPEG cannot be transcoded
    fallback_to_original: bool = False

    foreground: bool = True
    allow_other: bool = False
    progress: bool = False
    debug: bool = False

    def __post_init__(self):
        self.source = Path(self.source)
        self.mountpoint = Path(self.mountpoint)
        self.cache_dir = Path(self.cache_dir)
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if not 1 <= self.quality <= 95:
            raise ValueError(f"quality must be between 1 and 95, got {self.quality}")
