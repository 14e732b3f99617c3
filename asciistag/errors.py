"""Exception classes for AsciiStag."""


class AsciiStagError(Exception):
    """Base exception for all AsciiStag errors."""

    pass


class LoadError(AsciiStagError):
    """Raised when an image, GIF or video source can not be decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class ResizeError(AsciiStagError):
    """Raised when a buffer can not be resampled to the requested size."""

    pass


class OutputError(AsciiStagError):
    """Raised when the output destination can not be opened or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class ValidationError(AsciiStagError):
    """Raised for invalid render parameters (bad command line values)."""

    pass
