#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for scanned source files.
"""

import os
from dataclasses import dataclass

from ..utils.path import relative_key
from ..utils.time import ns_to_seconds


@dataclass(frozen=True)
class SourceEntry:
    """A regular file found by the scanner, with its raw stat metadata."""
    path: str
    relative_path: str
    size: int
    mode: int
    atime: float
    mtime: float
    ctime: float
    uid: int
    gid: int

    @classmethod
    def from_stat(cls, path: str, root: str, st: os.stat_result) -> 'SourceEntry':
        """Build an entry from an ``os.stat`` result."""
        return cls(
            path=path,
            relative_path=relative_key(os.path.relpath(path, root)),
            size=st.st_size,
            mode=st.st_mode,
            atime=ns_to_seconds(st.st_atime_ns),
            mtime=ns_to_seconds(st.st_mtime_ns),
            ctime=ns_to_seconds(st.st_ctime_ns),
            uid=st.st_uid,
            gid=st.st_gid,
        )
