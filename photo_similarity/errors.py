class DecodeError(ValueError):
    """Raw bytes (or a file's contents) could not be decoded into an image."""


class MissingFileError(FileNotFoundError):
    """One or both files of a comparison pair do not exist."""


class LengthMismatchError(ValueError):
    """Two fingerprints of different lengths were compared."""
