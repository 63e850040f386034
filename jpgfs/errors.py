"""Exception hierarchy for jpgfs."""


class JpgfsError(Exception):
    """Base class for all jpgfs errors."""


class EnumerationError(JpgfsError):
    """Metadata for a source entry could not be read during the scan."""


class TranscodeError(JpgfsError):
    """A JPEG could not be read, decoded, resized or re-encoded."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class TreeError(JpgfsError):
    """Invalid mutation of the virtual tree."""


class NodeNotFoundError(JpgfsError, KeyError):
    """No node exists at the requested relative path."""

    def __str__(self):
        return f"no such node: {self.args[0]!r}" if self.args else "no such node"


class BuildStateError(JpgfsError):
    """A tree builder was used outside its allowed state transitions."""


class MountError(JpgfsError):
    """The filesystem could not be mounted or served."""
