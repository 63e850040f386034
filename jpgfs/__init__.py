"""jpgfs - read-only FUSE mirror that serves downsized JPEGs."""

__version__ = "1.0.0"

# Import key classes for convenient top-level access
from .scanning import TreeBuilder, build_tree, scan_source, classify, MediaType
from .transcode import TranscodeCache
from .tree import VirtualTree, Node, PassthroughNode, TranscodedNode, DirectoryNode
from .models import SourceEntry, CachedArtifact, NodeAttributes, BuildStats, MountConfig
from .errors import (
    JpgfsError, EnumerationError, TranscodeError, TreeError,
    NodeNotFoundError, BuildStateError, MountError,
)

__all__ = [
    # Core classes
    'TreeBuilder',
    'TranscodeCache',
    'VirtualTree',

    # Nodes
    'Node',
    'PassthroughNode',
    'TranscodedNode',
    'DirectoryNode',

    # Scanning helpers
    'build_tree',
    'scan_source',
    'classify',
    'MediaType',

    # Data models
    'SourceEntry',
    'CachedArtifact',
    'NodeAttributes',
    'BuildStats',
    'MountConfig',

    # Errors
    'JpgfsError',
    'EnumerationError',
    'TranscodeError',
    'TreeError',
    'NodeNotFoundError',
    'BuildStateError',
    'MountError',

    # Package metadata
    '__version__',
]
