"""Data models for jpgfs."""

from .source_entry import SourceEntry
from .artifact import CachedArtifact
from .attributes import NodeAttributes
from .build_stats import BuildStats
from .mount_config import MountConfig

__all__ = ['SourceEntry', 'CachedArtifact', 'NodeAttributes', 'BuildStats', 'MountConfig']
