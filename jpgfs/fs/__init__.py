"""FUSE serving layer for jpgfs."""
