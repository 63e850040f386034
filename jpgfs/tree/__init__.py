"""In-memory virtual tree served by the filesystem layer."""

from .node import Node, FileNode, PassthroughNode, TranscodedNode, DirectoryNode
from .virtual_tree import VirtualTree

__all__ = ['Node', 'FileNode', 'PassthroughNode', 'TranscodedNode', 'DirectoryNode', 'VirtualTree']
