import io
from dataclasses import dataclass, field

from .cache import PixelCache
from .errors import IoError, PixelCountMismatch
from .header import serialize
from .pixel import START_PIXEL, Pixel, iter_pixels
from .qoi import QOI


@dataclass
class EncoderState:
    """Running state of one encode call: previous pixel, colour cache, pending run."""

    prev: Pixel = START_PIXEL
    cache: PixelCache = field(default_factory=PixelCache)
    run: int = 0


def _signed(delta: int) -> int:
    # Byte-wrapped difference shifted to -128..127
    return ((delta + 128) & 0xFF) - 128


def encode_pixel(state: EncoderState, px: Pixel, out: bytearray) -> None:
    """Append the chunk(s) for one pixel to ``out`` and advance ``state``."""
    prev = state.prev

    # Check for run
    if px == prev:
        state.run += 1
        if state.run == QOI.QOI_RUN_MAX:
            out.append(QOI.QOI_OP_RUN | (state.run - 1))
            state.run = 0
        return

    # If we had a run that ended, write it now
    if state.run > 0:
        out.append(QOI.QOI_OP_RUN | (state.run - 1))
        state.run = 0

    # Check Index
    index_pos = state.cache.hash(px)
    if state.cache.get(index_pos) == px:
        out.append(QOI.QOI_OP_INDEX | index_pos)
        state.prev = px
        return

    # Save current pixel to index
    state.cache.set(index_pos, px)

    if px.a == prev.a:
        vr = _signed(px.r - prev.r)
        vg = _signed(px.g - prev.g)
        vb = _signed(px.b - prev.b)

        vg_r = vr - vg
        vg_b = vb - vg

        # QOI_OP_DIFF (2-bit diffs)
        if -2 <= vr <= 1 and -2 <= vg <= 1 and -2 <= vb <= 1:
            out.append(QOI.QOI_OP_DIFF | ((vr + 2) << 4) | ((vg + 2) << 2) | (vb + 2))

        # QOI_OP_LUMA (green diff, and dr-dg, db-dg)
        elif -32 <= vg <= 31 and -8 <= vg_r <= 7 and -8 <= vg_b <= 7:
            out.append(QOI.QOI_OP_LUMA | (vg + 32))
            out.append(((vg_r + 8) << 4) | (vg_b + 8))

        # QOI_OP_RGB
        else:
            out.append(QOI.QOI_OP_RGB)
            out.extend((px.r, px.g, px.b))
    else:
        # QOI_OP_RGBA
        out.append(QOI.QOI_OP_RGBA)
        out.extend((px.r, px.g, px.b, px.a))

    state.prev = px


def finish(state: EncoderState, out: bytearray) -> None:
    """Flush the pending run and append the end marker."""
    if state.run > 0:
        out.append(QOI.QOI_OP_RUN | (state.run - 1))
        state.run = 0

    # 7 bytes of 0x00 followed by 1 byte of 0x01
    out.extend(QOI.QOI_END_MARKER)


class QOIEncoder:
    @staticmethod
    def encode(
        width: int,
        height: int,
        pixels,
        sink,
        channels: int = 4,
        colorspace: int = QOI.QOI_SRGB,
    ) -> int:
        """
        Encode exactly ``width * height`` pixels and write the QOI stream to ``sink``.

        Nothing is written to the sink unless the whole image encodes, so a
        pixel count mismatch leaves the sink untouched.

        :param width: image width in pixels.
        :param height: image height in pixels.
        :param pixels: finite iterable of pixels in raster order, each a Pixel or
                       a 3/4-item sequence of 0..255 ints.
        :param sink: object with a ``write(bytes)`` method.
        :param channels: 3 or 4, stored in the header only.
        :param colorspace: 0 or 1, stored in the header only.
        :return: number of bytes written.
        """
        header = serialize(width, height, channels, colorspace)
        total_pixels = width * height

        if hasattr(pixels, "__len__") and len(pixels) != total_pixels:
            raise PixelCountMismatch(total_pixels, len(pixels))

        result = bytearray(header)
        state = EncoderState()
        count = 0

        for value in pixels:
            count += 1
            if count > total_pixels:
                raise PixelCountMismatch(
                    total_pixels,
                    count,
                    f"QOI.encode: expected {total_pixels} pixels, got more",
                )
            encode_pixel(state, Pixel.coerce(value), result)

        if count != total_pixels:
            raise PixelCountMismatch(total_pixels, count)

        finish(state, result)

        # Raw sinks (FileIO, sockets) may accept fewer bytes than offered
        view = memoryview(result)
        while view:
            try:
                written = sink.write(view)
            except OSError as err:
                raise IoError(f"QOI.encode: writing to the sink failed: {err}") from err
            if written is None:
                break
            if written == 0:
                raise IoError("QOI.encode: the sink accepted no bytes")
            view = view[written:]

        return len(result)

    @staticmethod
    def encode_bytes(color_data, description: dict) -> bytes:
        """
        Encode a QOI file from raw interleaved pixel bytes.

        :param color_data: Bytes-like object (bytes, bytearray, list of ints) containing pixel data.
        :param description: Dictionary containing 'width', 'height', 'channels', 'colorspace'.
        :return: bytes object containing the QOI file content.
        """
        width = description.get("width")
        height = description.get("height")
        channels = description.get("channels", 4)
        colorspace = description.get("colorspace", QOI.QOI_SRGB)

        # Header validation first, so bad dimensions are reported as such
        serialize(width, height, channels, colorspace)

        pixel_length = width * height * channels
        if len(color_data) != pixel_length:
            raise PixelCountMismatch(
                width * height,
                len(color_data) // channels,
                "QOI.encode: The length of colorData is incorrect",
            )

        out = io.BytesIO()
        QOIEncoder.encode(
            width, height, iter_pixels(color_data, channels), out, channels, colorspace
        )
        return out.getvalue()

    @staticmethod
    def encode_file(path, width: int, height: int, pixels, channels: int = 4, colorspace: int = QOI.QOI_SRGB) -> int:
        """Encode ``pixels`` into a .qoi file at ``path``; returns the file size."""
        buffer = io.BytesIO()
        size = QOIEncoder.encode(width, height, pixels, buffer, channels, colorspace)

        try:
            with open(path, "wb") as f:
                f.write(buffer.getvalue())
        except OSError as err:
            raise IoError(f"QOI.encode: could not write {path}: {err}") from err

        return size


encode = QOIEncoder.encode
encode_bytes = QOIEncoder.encode_bytes
encode_file = QOIEncoder.encode_file
