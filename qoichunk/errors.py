class QOIError(ValueError):
    """Base class for everything the codec raises about a stream or its input."""


class InvalidHeader(QOIError):
    """The 14-byte preamble is not a QOI header (bad magic, channels or colorspace)."""


class InvalidDimensions(QOIError):
    """Width or height is zero or does not fit in 32 bits."""


class PixelCountMismatch(QOIError):
    """The encoder was given a different number of pixels than width * height."""

    def __init__(self, expected: int, actual: int, message: str = None):
        self.expected = expected
        self.actual = actual
        if message is None:
            message = (
                f"QOI.encode: expected {expected} pixels, got {actual}"
            )
        super().__init__(message)


class UnexpectedEof(QOIError):
    """The byte source ran dry before the image was complete."""


class TruncatedOpcode(UnexpectedEof):
    """A multi-byte opcode is missing some of its payload bytes."""

    def __init__(self, tag: int, needed: int, available: int):
        self.tag = tag
        self.needed = needed
        self.available = available
        super().__init__(
            f"QOI.decode: opcode 0x{tag:02x} needs {needed} payload bytes, "
            f"only {available} available"
        )


class InvalidEndMarker(QOIError):
    """The 8 bytes following the last chunk are not the end marker."""


class IoError(QOIError, OSError):
    """The byte sink or source failed; the original error is chained as __cause__."""
