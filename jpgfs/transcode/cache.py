#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Content-addressed transcode cache for jpgfs.

Artifacts are stored as ``<cache_dir>/<md5 of source bytes>.jpg``. The key
depends only on content, so duplicate images anywhere in the source tree (or
in a later run against the same cache directory) are transcoded once.
"""

import hashlib
import io
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Tuple, Union

from PIL import Image

from ..config import ARTIFACT_SUFFIX, JPEG_QUALITY, MAX_DIMENSION
from ..errors import TranscodeError
from ..models.artifact import CachedArtifact
from ..utils.path import ensure_dir

logger = logging.getLogger(__name__)

# Errors Pillow raises for unreadable or undecodable images
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)

# Pillow formats that are baseline JPEG files
_JPEG_FORMATS = ("JPEG", "MPO")


def content_hash(data: bytes) -> str:
    """Hex MD5 digest of ``data``."""
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def target_size(size: Tuple[int, int], max_dimension: int) -> Tuple[int, int]:
    """
    Scale ``size`` so its larger side is at most ``max_dimension``.

    Aspect ratio is kept (the smaller side is rounded, minimum 1 pixel).
    Images already within bounds are never upscaled.
    """
    w, h = size
    longest = max(w, h)
    if longest <= max_dimension:
        return (w, h)
    scale = max_dimension / longest
    if w >= h:
        return (max_dimension, max(1, round(h * scale)))
    return (max(1, round(w * scale)), max_dimension)


class TranscodeCache:
    """Resolves JPEG source files to downsized artifacts on disk."""

    def __init__(self, cache_dir: Union[str, Path], max_dimension: int = MAX_DIMENSION,
                 quality: int = JPEG_QUALITY):
        self.cache_dir = Path(cache_dir)
        self.max_dimension = max_dimension
        self.quality = quality

        self.transcoded = 0
        self.cache_hits = 0
        self._counter_lock = threading.Lock()

        # One lock per content hash currently being transcoded
        self._hash_locks: Dict[str, threading.Lock] = {}
        self._hash_locks_guard = threading.Lock()

    def artifact_path(self, digest: str) -> Path:
        return self.cache_dir / f"{digest}{ARTIFACT_SUFFIX}"

    def resolve(self, path: Union[str, Path]) -> CachedArtifact:
        """
        Return the cached artifact for the JPEG at ``path``.

        The file is read and hashed; an existing artifact is returned without
        decoding anything. Otherwise the image is decoded, downsized,
        re-encoded and atomically published under its hash.

        Raises TranscodeError if the file cannot be read or is not a valid
        JPEG.
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise TranscodeError(path, f"read failed: {e.strerror or e}") from e

        digest = content_hash(data)
        artifact = self._lookup(digest)
        if artifact is not None:
            self._count('cache_hits')
            return artifact

        lock = self._lock_for(digest)
        try:
            with lock:
                # Another worker may have published it while we waited
                artifact = self._lookup(digest)
                if artifact is not None:
                    self._count('cache_hits')
                    return artifact

                self._transcode(path, data, self.artifact_path(digest))
                self._count('transcoded')
                artifact = self._lookup(digest)
        finally:
            self._release_lock(digest, lock)

        if artifact is None:
            raise TranscodeError(path, "artifact vanished after publish")
        return artifact

    def _lookup(self, digest: str):
        target = self.artifact_path(digest)
        try:
            size = target.stat().st_size
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TranscodeError(target, f"cache lookup failed: {e.strerror or e}") from e
        return CachedArtifact(hash=digest, path=target, size=size)

    def _transcode(self, path, data: bytes, target: Path) -> None:
        logger.debug("Transcoding %s -> %s", path, target.name)
        try:
            with Image.open(io.BytesIO(data)) as img:
                # MPO is a JPEG with a multi-picture block; frame 0 is the primary image
                if img.format not in _JPEG_FORMATS:
                    raise TranscodeError(path, f"not a JPEG image (format={img.format})")
                img.load()

                new_size = target_size(img.size, self.max_dimension)
                out = img if new_size == img.size else img.resize(new_size, Image.Resampling.LANCZOS)
                if out.mode not in ("RGB", "L", "CMYK"):
                    out = out.convert("RGB")

                save_kwargs = {"format": "JPEG", "quality": self.quality}
                for key in ("icc_profile", "exif"):
                    if img.info.get(key):
                        save_kwargs[key] = img.info[key]

                self._publish(out, target, save_kwargs)
        except TranscodeError:
            raise
        except _DECODE_ERRORS as e:
            raise TranscodeError(path, str(e) or type(e).__name__) from e

    def _publish(self, image: Image.Image, target: Path, save_kwargs: dict) -> None:
        """Write to a temporary file in the cache directory, then rename into place."""
        ensure_dir(self.cache_dir)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp-", suffix=ARTIFACT_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as f:
                image.save(f, **save_kwargs)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def _lock_for(self, digest: str) -> threading.Lock:
        with self._hash_locks_guard:
            return self._hash_locks.setdefault(digest, threading.Lock())

    def _release_lock(self, digest: str, lock: threading.Lock) -> None:
        # Safe to drop once published: later callers hit the fast path
        with self._hash_locks_guard:
            if not lock.locked() and self._hash_locks.get(digest) is lock:
                del self._hash_locks[digest]

    def _count(self, name: str) -> None:
        with self._counter_lock:
            setattr(self, name, getattr(self, name) + 1)
