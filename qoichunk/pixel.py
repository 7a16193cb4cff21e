from typing import NamedTuple

from .qoi import QOI


class Pixel(NamedTuple):
    """An RGBA pixel, 8 bits per channel.

    Being a tuple, a Pixel compares equal to the plain ``(r, g, b, a)`` tuple
    holding the same values.
    """

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def rgba(cls, r: int, g: int, b: int, a: int) -> "Pixel":
        return cls(r, g, b, a)

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> "Pixel":
        """Create a pixel with a fully opaque (255) alpha channel."""
        return cls(r, g, b, 255)

    @classmethod
    def transparent(cls) -> "Pixel":
        return cls(0, 0, 0, 0)

    @classmethod
    def coerce(cls, value) -> "Pixel":
        """
        Turn a 3- or 4-item sequence of ints into a Pixel.

        :param value: Pixel, tuple, list or numpy row holding r, g, b[, a].
        :return: Pixel, alpha defaulting to 255 for 3-item input.
        """
        if len(value) == 4:
            px = cls(int(value[0]), int(value[1]), int(value[2]), int(value[3]))
        elif len(value) == 3:
            px = cls(int(value[0]), int(value[1]), int(value[2]), 255)
        else:
            raise ValueError(f"QOI.encode: a pixel needs 3 or 4 channels, got {len(value)}")

        for channel in px:
            if not 0 <= channel <= 255:
                raise ValueError(f"QOI.encode: channel value {channel} is outside 0..255")
        return px

    def hash(self) -> int:
        """Slot of this pixel in the 64-entry colour cache; also works on plain tuples."""
        r, g, b, a = self
        return (r * 3 + g * 5 + b * 7 + a * 11) % QOI.QOI_INDEX_SIZE

    def pack(self) -> int:
        """Pack the pixel into a 32-bit RGBA integer."""
        return (self.r << 24) | (self.g << 16) | (self.b << 8) | self.a

    @classmethod
    def unpack(cls, packed: int) -> "Pixel":
        """Unpack the pixel from a 32-bit RGBA integer."""
        return cls(
            (packed >> 24) & 0xFF,
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
        )


START_PIXEL = Pixel(*QOI.QOI_START_PIXEL)


def iter_pixels(color_data, channels: int):
    """
    Walk interleaved RGB or RGBA bytes one pixel at a time.

    :param color_data: bytes-like object (bytes, bytearray, list of ints).
    :param channels: 3 (alpha is filled in as 255) or 4.
    """
    if channels not in QOI.QOI_CHANNELS:
        raise ValueError("QOI: Invalid channels, must be 3 or 4")

    # We step through the raw bytes based on channel count
    for i in range(0, len(color_data) - channels + 1, channels):
        r = color_data[i]
        g = color_data[i + 1]
        b = color_data[i + 2]
        a = color_data[i + 3] if channels == 4 else 255
        yield Pixel(r, g, b, a)
