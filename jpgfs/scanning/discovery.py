#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
File discovery for jpgfs.
Walks the source tree once and yields every regular file with its metadata.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Iterator, Optional, Union

from ..errors import EnumerationError
from ..models.build_stats import BuildStats
from ..models.source_entry import SourceEntry

logger = logging.getLogger(__name__)


def stat_entry(path: str, root: str) -> SourceEntry:
    """
    Stat a single path and wrap it as a SourceEntry.

    Symlinks are followed, so a link to a regular file is served as its
    target. Raises EnumerationError when the metadata cannot be read or the
    path is not a regular file, or when its relative path cannot be
    encoded as UTF-8 for the filesystem layer.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise EnumerationError(f"{path}: {e.strerror or e}") from e
    if not stat.S_ISREG(st.st_mode):
        raise EnumerationError(f"{path}: not a regular file")
    entry = SourceEntry.from_stat(path, root, st)
    try:
        entry.relative_path.encode("utf-8")
    except UnicodeEncodeError:
        raise EnumerationError(f"{entry.relative_path!r}: name is not valid UTF-8") from None
    return entry


def scan_source(root: Union[str, Path], stats: Optional[BuildStats] = None) -> Iterator[SourceEntry]:
    """
    Recursively enumerate regular files below ``root``.

    Directories are traversed but never yielded, and symlinked directories
    are not descended into. Entries that fail to stat are skipped so one bad
    entry never stops the rest of the walk.
    """
    root = os.fspath(root)

    def _on_walk_error(err: OSError):
        logger.debug("Skipping unreadable directory %s: %s", err.filename, err.strerror)
        if stats is not None:
            stats.incr('skipped')

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error, followlinks=False):
        # Deterministic walk order
        dirnames.sort()
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            try:
                entry = stat_entry(full, root)
            except EnumerationError as e:
                logger.debug("Skipping %s", e)
                if stats is not None:
                    stats.incr('skipped')
                continue
            if stats is not None:
                stats.incr('scanned')
            yield entry
