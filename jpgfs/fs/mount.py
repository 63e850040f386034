#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Mount lifecycle: build the tree, then hand it to FUSE.
"""

import logging
import sys
from typing import Any, Dict, Optional

from fuse import FUSE

from ..config import FS_SUBTYPE, VOLUME_NAME
from ..errors import MountError
from ..models.mount_config import MountConfig
from ..scanning.dispatcher import TreeBuilder
from ..tree.virtual_tree import VirtualTree
from .operations import JpgFS

logger = logging.getLogger(__name__)


def mount_options(config: MountConfig, platform: Optional[str] = None) -> Dict[str, Any]:
    """FUSE mount options for ``config``."""
    platform = platform or sys.platform
    options: Dict[str, Any] = {
        "fsname": str(config.source),
        "subtype": FS_SUBTYPE,
        "ro": True,
    }
    # Volume name and local-volume semantics are macFUSE options
    if platform == "darwin":
        options["volname"] = VOLUME_NAME
        options["local"] = True
    if config.allow_other:
        options["allow_other"] = True
    return options


def serve(tree: VirtualTree, config: MountConfig) -> None:
    """Mount ``tree`` at the configured mountpoint and block until unmounted."""
    if not tree.frozen:
        raise MountError("refusing to serve a tree that is still being built")

    options = mount_options(config)
    logger.info("Mounting %s at %s (%d files)", config.source, config.mountpoint, len(tree))
    try:
        FUSE(JpgFS(tree), str(config.mountpoint), foreground=config.foreground, **options)
    except (RuntimeError, OSError) as e:
        raise MountError(f"mount at {config.mountpoint} failed: {e}") from e
    logger.info("Unmounted %s", config.mountpoint)


def mount(config: MountConfig) -> VirtualTree:
    """Build the virtual tree for ``config.source`` and serve it."""
    if not config.mountpoint.is_dir():
        raise MountError(f"mountpoint {config.mountpoint} is not a directory")

    tree = TreeBuilder.from_config(config).build(config.source)
    serve(tree, config)
    return tree
