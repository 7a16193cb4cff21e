import struct
from typing import NamedTuple

from .errors import InvalidDimensions, InvalidHeader, UnexpectedEof
from .qoi import QOI


class QOIHeader(NamedTuple):
    width: int
    height: int
    channels: int = 4
    colorspace: int = QOI.QOI_SRGB

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pack(self) -> bytes:
        return serialize(self.width, self.height, self.channels, self.colorspace)


def validate_dimensions(width: int, height: int) -> None:
    if not (0 < width <= QOI.QOI_DIMENSION_MAX):
        raise InvalidDimensions(f"QOI: Invalid width {width}")

    if not (0 < height <= QOI.QOI_DIMENSION_MAX):
        raise InvalidDimensions(f"QOI: Invalid height {height}")


def serialize(width: int, height: int, channels: int = 4, colorspace: int = QOI.QOI_SRGB) -> bytes:
    """
    Build the 14-byte QOI header.

    :param width: image width, 1 .. 2**32 - 1
    :param height: image height, 1 .. 2**32 - 1
    :param channels: 3 (RGB) or 4 (RGBA), informational only
    :param colorspace: 0 (sRGB with linear alpha) or 1 (all linear), informational only
    :return: header bytes
    """
    validate_dimensions(width, height)

    if channels not in QOI.QOI_CHANNELS:
        raise InvalidHeader("QOI.encode: Invalid channels, must be 3 or 4")

    if colorspace not in QOI.QOI_COLORSPACES:
        raise InvalidHeader("QOI.encode: Invalid colorspace, must be 0 or 1")

    # 0-3: magic "qoif"
    # 4-7: width (Big Endian), 8-11: height (Big Endian)
    # 12: channels, 13: colorspace
    return struct.pack(QOI.QOI_HEADER_FORMAT, QOI.QOI_MAGIC, width, height, channels, colorspace)


def parse(data: bytes) -> QOIHeader:
    """
    Parse the 14-byte QOI header.

    Channels and colorspace are passed through as found; decoding never
    depends on them.
    """
    if len(data) < QOI.QOI_HEADER_SIZE:
        raise UnexpectedEof("QOI.decode: File too short for header")

    # > : Big Endian
    # 4s: 4-byte string (magic)
    # I : unsigned int (4 bytes)
    # B : unsigned char (1 byte)
    magic, width, height, channels, colorspace = struct.unpack(
        QOI.QOI_HEADER_FORMAT, bytes(data[: QOI.QOI_HEADER_SIZE])
    )

    if magic != QOI.QOI_MAGIC:
        raise InvalidHeader(f"QOI.decode: The signature of the QOI file is invalid: {magic!r}")

    if width == 0 or height == 0:
        raise InvalidDimensions(f"QOI.decode: The image has no size ({width}x{height})")

    return QOIHeader(width, height, channels, colorspace)
