#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Attribute record served for every virtual node.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class NodeAttributes:
    """File attributes as reported to the filesystem layer."""
    mode: int
    size: int
    atime: float
    mtime: float
    ctime: float
    crtime: float
    uid: int
    gid: int
    nlink: int = 1

    def to_stat_dict(self) -> Dict[str, Any]:
        """Map to the ``st_*`` keys expected by fusepy's ``getattr``."""
        return {
            "st_mode": self.mode,
            "st_size": self.size,
            "st_atime": self.atime,
            "st_mtime": self.mtime,
            "st_ctime": self.ctime,
            "st_birthtime": self.crtime,
            "st_uid": self.uid,
            "st_gid": self.gid,
            "st_nlink": self.nlink,
        }
