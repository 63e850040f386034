"""Media type classification by file extension."""

import enum
from pathlib import PurePath
from typing import Iterable, Optional, Set

from ..config import JPEG_EXT


class MediaType(enum.Enum):
    JPEG = "image/jpeg"
    PASSTHROUGH = "application/octet-stream"


def classify(path: str, jpeg_extensions: Optional[Iterable[str]] = None) -> MediaType:
    """Classify a path by its extension. Unknown types pass through."""
    extensions: Set[str] = set(jpeg_extensions) if jpeg_extensions is not None else JPEG_EXT
    if PurePath(path).suffix.lower() in extensions:
        return MediaType.JPEG
    return MediaType.PASSTHROUGH
