"""Error taxonomy for library scanning and thumbnail generation.

Only LibraryIOError on a library root is meant to reach callers; the
other errors are raised per item and converted to default values by the
scanners.
"""


class MediaShelfError(RuntimeError):
    """Base class for all media_shelf failures."""


class LibraryIOError(MediaShelfError):
    """A path is missing or cannot be read."""


class DecodeError(MediaShelfError):
    """An image is corrupt or in an unsupported format."""


class EncodeError(MediaShelfError):
    """A thumbnail could not be encoded or written to the cache."""


class ExternalToolError(MediaShelfError):
    """The video cover tool failed or exited with a nonzero status."""
