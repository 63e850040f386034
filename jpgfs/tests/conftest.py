#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared fixtures for the jpgfs test suite.
"""

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Make the jpgfs package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


def write_jpeg(path: Path, size=(64, 48), color=(200, 30, 30), mode="RGB", **save_kwargs) -> Path:
    """Write a solid-color JPEG and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, format="JPEG", **save_kwargs)
    return path


def write_file(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def image_size(data: bytes):
    with Image.open(io.BytesIO(data)) as img:
        return img.format, img.size


@pytest.fixture
def source_dir(tmp_path):
    src = tmp_path / "source"
    src.mkdir()
    return src


@pytest.fixture
def cache_dir(tmp_path):
    # Not created up front; the cache creates it on demand
    return tmp_path / "cache"


@pytest.fixture
def corrupt_jpeg_bytes():
    # Valid SOI marker followed by garbage
    return b"\xff\xd8\xff" + b"this is not image data" * 4
