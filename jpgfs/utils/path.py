#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Path utility functions for jpgfs.
"""

import os
from pathlib import Path


def ensure_dir(p: Path) -> None:
    """Ensure directory exists, creating it if necessary."""
    p.mkdir(parents=True, exist_ok=True)


def relative_key(path: str) -> str:
    """
    Normalize a path into a virtual tree key.

    Keys use POSIX separators and carry no leading or trailing slash; the
    root directory is the empty string.
    """
    key = path.replace(os.sep, "/").strip("/")
    if not key or key == ".":
        return ""
    parts = [part for part in key.split("/") if part and part != "."]
    return "/".join(parts)
