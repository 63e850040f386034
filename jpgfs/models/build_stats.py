#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Counters collected while building the virtual tree.
"""

import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict


@dataclass
class BuildStats:
    """Thread-safe build counters."""
    scanned: int = 0
    skipped: int = 0
    inserted: int = 0
    passthrough: int = 0
    transcoded: int = 0
    fallback: int = 0
    failed: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}
