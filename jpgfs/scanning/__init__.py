"""Scanning and tree-building modules for jpgfs."""

from .classifier import MediaType, classify
from .discovery import scan_source, stat_entry
from .dispatcher import BuildState, TreeBuilder, build_tree

__all__ = [
    'MediaType',
    'classify',
    'scan_source',
    'stat_entry',
    'BuildState',
    'TreeBuilder',
    'build_tree',
]
