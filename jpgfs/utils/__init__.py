"""Utility functions for jpgfs."""

from .time import ns_to_seconds
from .path import ensure_dir, relative_key

__all__ = ['ns_to_seconds', 'ensure_dir', 'relative_key']
