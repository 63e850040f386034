"""Cached transcode artifact."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CachedArtifact:
    """A resized JPEG stored in the cache under its source content hash."""
    hash: str
    path: Path
    size: int
