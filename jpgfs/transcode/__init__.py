"""Content-addressed JPEG transcode cache."""

from .cache import TranscodeCache, content_hash, target_size

__all__ = ['TranscodeCache', 'content_hash', 'target_size']
