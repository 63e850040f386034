#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Time utility functions for jpgfs.
"""


def ns_to_seconds(ns: int) -> float:
    """Convert a stat nanosecond timestamp to float seconds."""
    return ns / 1_000_000_000
