#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
fusepy operations backed by a frozen VirtualTree.
"""

import errno
import itertools
import logging
import os
import threading
from typing import Dict

from fuse import FuseOSError, LoggingMixIn, Operations

from ..errors import NodeNotFoundError
from ..tree.node import Node
from ..tree.virtual_tree import VirtualTree

logger = logging.getLogger(__name__)


class JpgFS(LoggingMixIn, Operations):
    """
    Read-only filesystem over a built VirtualTree.

    Nodes only support whole-file reads, so ``open`` loads the full content
    once and ``read`` slices it for the kernel's offset requests.
    """

    def __init__(self, tree: VirtualTree):
        self.tree = tree
        self._handles: Dict[int, bytes] = {}
        self._handles_lock = threading.Lock()
        self._fh_counter = itertools.count(1)

    # ---------- helpers ----------
    def _node(self, path: str) -> Node:
        try:
            return self.tree.lookup(path)
        except NodeNotFoundError:
            raise FuseOSError(errno.ENOENT)

    def _read_node(self, node: Node) -> bytes:
        try:
            return node.read_all()
        except OSError as e:
            logger.error("Read failed for %s: %s", node.relative_path, e)
            raise FuseOSError(e.errno or errno.EIO)

    # ---------- metadata ----------
    def getattr(self, path, fh=None):
        return self._node(path).attributes().to_stat_dict()

    def readdir(self, path, fh):
        node = self._node(path)
        if not node.is_dir:
            raise FuseOSError(errno.ENOTDIR)
        return [".", ".."] + node.children()

    def access(self, path, amode):
        self._node(path)
        if amode & os.W_OK:
            raise FuseOSError(errno.EROFS)
        return 0

    def statfs(self, path):
        return {
            "f_bsize": 4096,
            "f_frsize": 4096,
            "f_blocks": 0,
            "f_bfree": 0,
            "f_bavail": 0,
            "f_files": len(self.tree),
            "f_ffree": 0,
            "f_favail": 0,
            "f_namemax": 255,
        }

    # ---------- content ----------
    def open(self, path, flags):
        node = self._node(path)
        if node.is_dir:
            raise FuseOSError(errno.EISDIR)
        if flags & os.O_ACCMODE != os.O_RDONLY:
            raise FuseOSError(errno.EROFS)

        data = self._read_node(node)
        with self._handles_lock:
            fh = next(self._fh_counter)
            self._handles[fh] = data
        return fh

    def read(self, path, size, offset, fh):
        with self._handles_lock:
            data = self._handles.get(fh)
        if data is None:
            node = self._node(path)
            if node.is_dir:
                raise FuseOSError(errno.EISDIR)
            data = self._read_node(node)
        return data[offset:offset + size]

    def release(self, path, fh):
        with self._handles_lock:
            self._handles.pop(fh, None)
        return 0
