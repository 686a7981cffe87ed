class QuantizationError(Exception):
    """Base class for errors raised by cquant."""


class InvalidArgumentError(QuantizationError, ValueError):
    """A required collaborator is missing or a parameter is out of range."""


class ImageIOError(QuantizationError, OSError):
    """An image could not be read from or written to storage."""
