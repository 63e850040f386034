#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Virtual nodes.

Every node answers two questions for the filesystem layer: what are its
attributes, and what is its full content. File variants differ only in where
the content lives and how big it is, so new content transforms are added as
new variants without touching the serving layer.
"""

import stat
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, TYPE_CHECKING

from ..models.artifact import CachedArtifact
from ..models.attributes import NodeAttributes
from ..models.source_entry import SourceEntry

if TYPE_CHECKING:
    from .virtual_tree import VirtualTree


class Node(ABC):
    """Capability interface consumed by the filesystem layer."""

    relative_path: str

    @abstractmethod
    def attributes(self) -> NodeAttributes:
        """Return the attributes reported for this node."""

    @abstractmethod
    def read_all(self) -> bytes:
        """Return the node's entire content."""

    @property
    def is_dir(self) -> bool:
        return False

    def __repr__(self):
        return f"{type(self).__name__}({self.relative_path!r})"


class FileNode(Node):
    """A served regular file whose metadata comes from the source entry."""

    def __init__(self, entry: SourceEntry, content_path: Path, size: int):
        self.relative_path = entry.relative_path
        self.source_path = Path(entry.path)
        self.content_path = Path(content_path)
        self._attrs = NodeAttributes(
            mode=entry.mode,
            size=size,
            atime=entry.atime,
            mtime=entry.mtime,
            ctime=entry.ctime,
            crtime=entry.ctime,  # no creation time in stat; reuse change time
            uid=entry.uid,
            gid=entry.gid,
        )

    def attributes(self) -> NodeAttributes:
        return self._attrs

    def read_all(self) -> bytes:
        return self.content_path.read_bytes()


class PassthroughNode(FileNode):
    """Serves the source file unchanged."""

    def __init__(self, entry: SourceEntry):
        super().__init__(entry, Path(entry.path), entry.size)


class TranscodedNode(FileNode):
    """Serves a cached, downsized copy in place of the source JPEG."""

    def __init__(self, entry: SourceEntry, artifact: CachedArtifact):
        super().__init__(entry, artifact.path, artifact.size)
        self.artifact = artifact


class DirectoryNode(Node):
    """Implicit directory derived from the path segments of file nodes."""

    def __init__(self, tree: 'VirtualTree', relative_path: str, attrs: NodeAttributes):
        self.tree = tree
        self.relative_path = relative_path
        self._attrs = attrs

    @property
    def is_dir(self) -> bool:
        return True

    def attributes(self) -> NodeAttributes:
        return self._attrs

    def read_all(self) -> bytes:
        raise IsADirectoryError(self.relative_path or "/")

    def children(self) -> List[str]:
        return self.tree.listdir(self.relative_path)


def directory_attributes(timestamp: float, uid: int, gid: int) -> NodeAttributes:
    """Attributes for a synthesized read-only directory."""
    return NodeAttributes(
        mode=stat.S_IFDIR | 0o555,
        size=0,
        atime=timestamp,
        mtime=timestamp,
        ctime=timestamp,
        crtime=timestamp,
        uid=uid,
        gid=gid,
        nlink=2,
    )
