#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Worker pool that turns scanned source files into a frozen virtual tree.

The scanner runs on the calling thread and feeds a bounded queue; a fixed
set of worker threads classify each entry, transcode JPEGs through the
cache and insert the resulting node. The tree is returned only after every
worker has been joined.
"""

import enum
import logging
import time
from pathlib import Path
from queue import Queue
from threading import Thread
from typing import Iterable, Optional, Union

from tqdm import tqdm

from ..config import DEFAULT_WORKERS
from ..errors import BuildStateError, JpgfsError, TranscodeError
from ..models.build_stats import BuildStats
from ..models.mount_config import MountConfig
from ..models.source_entry import SourceEntry
from ..transcode.cache import TranscodeCache
from ..tree.node import FileNode, PassthroughNode, TranscodedNode
from ..tree.virtual_tree import VirtualTree
from .classifier import MediaType, classify
from .discovery import scan_source

logger = logging.getLogger(__name__)


class BuildState(enum.Enum):
    UNBUILT = "unbuilt"
    SCANNING = "scanning"
    DRAINING = "draining"
    BUILT = "built"


class TreeBuilder:
    """
    Builds a VirtualTree from a source directory, once.

    Per-file failures drop that file (or serve the original when
    ``fallback_to_original`` is set) and never abort the build.
    """

    def __init__(self, cache: TranscodeCache, workers: int = DEFAULT_WORKERS,
                 fallback_to_original: bool = False, progress: bool = False,
                 queue_size: Optional[int] = None,
                 jpeg_extensions: Optional[Iterable[str]] = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.cache = cache
        self.workers = workers
        self.fallback_to_original = fallback_to_original
        self.progress = progress
        self.queue_size = queue_size or workers
        self.jpeg_extensions = set(jpeg_extensions) if jpeg_extensions is not None else None

        self.state = BuildState.UNBUILT
        self.stats = BuildStats()
        self._stop = object()

    @classmethod
    def from_config(cls, config: MountConfig) -> 'TreeBuilder':
        cache = TranscodeCache(config.cache_dir, max_dimension=config.max_dimension,
                               quality=config.quality)
        return cls(cache, workers=config.workers,
                   fallback_to_original=config.fallback_to_original,
                   progress=config.progress)

    def build(self, source: Union[str, Path]) -> VirtualTree:
        """Scan ``source``, process every file and return the frozen tree."""
        if self.state is not BuildState.UNBUILT:
            raise BuildStateError(f"builder already used (state={self.state.value})")

        source = Path(source)
        start_time = time.perf_counter()
        logger.info("Building tree for %s with %d workers (cache: %s)",
                    source, self.workers, self.cache.cache_dir)

        tree = VirtualTree()
        q: "Queue[object]" = Queue(maxsize=self.queue_size)
        bar = tqdm(desc="jpgfs", unit="file", disable=not self.progress)
        threads = [
            Thread(target=self._run_worker, args=(q, tree, bar),
                   name=f"jpgfs-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for th in threads:
            th.start()

        self.state = BuildState.SCANNING
        try:
            for entry in scan_source(source, self.stats):
                q.put(entry)
        finally:
            self.state = BuildState.DRAINING
            for _ in threads:
                q.put(self._stop)
            for th in threads:
                th.join()
            bar.close()

        tree.freeze()
        self.state = BuildState.BUILT

        elapsed = time.perf_counter() - start_time
        self._log_summary(tree, elapsed)
        return tree

    def process_entry(self, entry: SourceEntry, tree: VirtualTree) -> Optional[FileNode]:
        """Classify one entry, build its node and insert it. Returns None if dropped."""
        node: FileNode
        if classify(entry.path, self.jpeg_extensions) is MediaType.JPEG:
            try:
                artifact = self.cache.resolve(entry.path)
            except TranscodeError as e:
                if not self.fallback_to_original:
                    logger.warning("Dropping %s: %s", entry.relative_path, e.reason)
                    self.stats.incr('failed')
                    return None
                logger.warning("Serving original for %s: %s", entry.relative_path, e.reason)
                node = PassthroughNode(entry)
                self.stats.incr('fallback')
            else:
                node = TranscodedNode(entry, artifact)
                self.stats.incr('transcoded')
        else:
            node = PassthroughNode(entry)
            self.stats.incr('passthrough')

        tree.insert(entry.relative_path, node)
        self.stats.incr('inserted')
        return node

    def _run_worker(self, q: Queue, tree: VirtualTree, bar: tqdm):
        while True:
            item = q.get()
            if item is self._stop:
                break
            try:
                self.process_entry(item, tree)
            except JpgfsError as e:
                logger.warning("Dropping %s: %s", item.relative_path, e)
                self.stats.incr('failed')
            except Exception:
                logger.exception("Unexpected error processing %s", item.path)
                self.stats.incr('failed')
            finally:
                bar.update(1)

    def _log_summary(self, tree: VirtualTree, elapsed: float):
        stats = self.stats
        logger.info("Tree built: %d files in %.1fs", len(tree), elapsed)
        logger.info("  - Passthrough: %d, transcoded: %d (new: %d, cached: %d)",
                    stats.passthrough, stats.transcoded,
                    self.cache.transcoded, self.cache.cache_hits)
        if stats.fallback:
            logger.info("  - Served original after transcode failure: %d", stats.fallback)
        if stats.failed:
            logger.warning("  - Dropped: %d", stats.failed)
        if stats.skipped:
            logger.info("  - Skipped during scan: %d", stats.skipped)
        logger.debug("Build stats: %s", stats.to_dict())


def build_tree(source: Union[str, Path], cache_dir: Union[str, Path], **kwargs) -> VirtualTree:
    """Convenience wrapper: build a tree with a fresh cache and builder."""
    cache_kwargs = {k: kwargs.pop(k) for k in ('max_dimension', 'quality') if k in kwargs}
    cache = TranscodeCache(cache_dir, **cache_kwargs)
    return TreeBuilder(cache, **kwargs).build(source)
