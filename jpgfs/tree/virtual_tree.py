#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Path-keyed virtual tree.

Files are stored by normalized relative path. Directories are never inserted;
they exist because some file path runs through them.
"""

import os
import threading
import time
from typing import Dict, Iterator, List, Optional, Set

from ..errors import NodeNotFoundError, TreeError
from ..utils.path import relative_key
from .node import DirectoryNode, FileNode, Node, directory_attributes


class VirtualTree:
    """Mapping of relative path to node, built concurrently then frozen."""

    def __init__(self, created_at: Optional[float] = None):
        self._files: Dict[str, FileNode] = {}
        self._dirs: Dict[str, Set[str]] = {"": set()}
        self._lock = threading.Lock()
        self._frozen = False
        self._dir_attrs = directory_attributes(
            created_at if created_at is not None else time.time(), os.getuid(), os.getgid()
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def insert(self, relative_path: str, node: FileNode) -> None:
        """Add a file node. Raises TreeError on duplicates, conflicts or after freeze."""
        key = relative_key(relative_path)
        if not key:
            raise TreeError("cannot insert a node at the tree root")

        with self._lock:
            if self._frozen:
                raise TreeError(f"tree is frozen, cannot insert {key!r}")
            if key in self._files:
                raise TreeError(f"duplicate path {key!r}")
            if key in self._dirs:
                raise TreeError(f"{key!r} is already a directory")

            parts = key.split("/")
            parents = ["/".join(parts[:i]) for i in range(len(parts))]
            for parent in parents:
                if parent in self._files:
                    raise TreeError(f"{parent!r} is a file, cannot hold {key!r}")

            for parent, name in zip(parents, parts):
                self._dirs.setdefault(parent, set()).add(name)
            self._files[key] = node

    def freeze(self) -> None:
        """Make the tree read-only."""
        with self._lock:
            self._frozen = True

    def lookup(self, relative_path: str) -> Node:
        key = relative_key(relative_path)
        node = self._files.get(key)
        if node is not None:
            return node
        if key in self._dirs:
            return DirectoryNode(self, key, self._dir_attrs)
        raise NodeNotFoundError(key)

    def root(self) -> DirectoryNode:
        return DirectoryNode(self, "", self._dir_attrs)

    def is_dir(self, relative_path: str) -> bool:
        return relative_key(relative_path) in self._dirs

    def listdir(self, relative_path: str = "") -> List[str]:
        """Sorted names directly below a directory."""
        key = relative_key(relative_path)
        if key in self._files:
            raise NotADirectoryError(key)
        children = self._dirs.get(key)
        if children is None:
            raise NodeNotFoundError(key)
        return sorted(children)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._files))

    def __contains__(self, relative_path) -> bool:
        key = relative_key(relative_path)
        return key in self._files or key in self._dirs
