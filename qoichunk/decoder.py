import io
from dataclasses import dataclass, field

from .cache import PixelCache
from .errors import InvalidEndMarker, InvalidHeader, IoError, TruncatedOpcode, UnexpectedEof
from .header import QOIHeader, parse
from .pixel import START_PIXEL, Pixel
from .qoi import QOI


class ByteSource:
    """Reads exact byte counts from bytes-like data or a file-like object."""

    def __init__(self, source):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(source)
        self._read = source.read

    def read(self, n: int) -> bytes:
        """Return up to ``n`` bytes; fewer only when the source is exhausted."""
        chunks = []
        remaining = n
        while remaining > 0:
            try:
                chunk = self._read(remaining)
            except OSError as err:
                raise IoError(f"QOI.decode: reading the source failed: {err}") from err
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def payload(self, tag: int, n: int) -> bytes:
        data = self.read(n)
        if len(data) < n:
            raise TruncatedOpcode(tag, n, len(data))
        return data


@dataclass
class DecoderState:
    """Running state of one decode call, mirroring EncoderState."""

    remaining: int
    prev: Pixel = START_PIXEL
    cache: PixelCache = field(default_factory=PixelCache)


def decode_chunk(state: DecoderState, b1: int, source: ByteSource) -> tuple:
    """
    Decode the chunk starting with tag byte ``b1``.

    Returns ``(pixel, count)``: the pixel and how many times it repeats. Only
    QOI_OP_RUN yields a count above one.
    """
    prev = state.prev

    # QOI_OP_RGB (0xFE/0b11111110)
    if b1 == QOI.QOI_OP_RGB:
        r, g, b = source.payload(b1, 3)
        px = Pixel(r, g, b, prev.a)

    # QOI_OP_RGBA (0xFF/0b11111111)
    elif b1 == QOI.QOI_OP_RGBA:
        r, g, b, a = source.payload(b1, 4)
        px = Pixel(r, g, b, a)

    # QOI_OP_INDEX (00xxxxxx)
    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_INDEX:
        px = state.cache.get(b1 & QOI.QOI_MASK_6)
        state.prev = px
        return px, 1

    # QOI_OP_DIFF (01xxxxxx)
    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_DIFF:
        # Extract 2-bit differences and subtract bias of 2
        px = Pixel(
            (prev.r + ((b1 >> 4) & 0x03) - 2) & 0xFF,
            (prev.g + ((b1 >> 2) & 0x03) - 2) & 0xFF,
            (prev.b + (b1 & 0x03) - 2) & 0xFF,
            prev.a,
        )

    # QOI_OP_LUMA (10xxxxxx)
    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_LUMA:
        b2 = source.payload(b1, 1)[0]
        dg = (b1 & QOI.QOI_MASK_6) - 32
        dr_dg = ((b2 >> 4) & 0x0F) - 8
        db_dg = (b2 & 0x0F) - 8
        px = Pixel(
            (prev.r + dg + dr_dg) & 0xFF,
            (prev.g + dg) & 0xFF,
            (prev.b + dg + db_dg) & 0xFF,
            prev.a,
        )

    # QOI_OP_RUN (11xxxxxx)
    else:
        return prev, (b1 & QOI.QOI_MASK_6) + 1

    state.cache.store(px)
    state.prev = px
    return px, 1


def iter_decoded(header: QOIHeader, source: ByteSource, strict: bool = True):
    """
    Yield the ``header.pixel_count`` pixels of the chunk stream in ``source``.

    With ``strict`` the 8 bytes after the last pixel must be the end marker.
    """
    state = DecoderState(remaining=header.pixel_count)

    while state.remaining > 0:
        tag = source.read(1)
        if not tag:
            raise UnexpectedEof(
                "QOI.decode: Incomplete image, "
                f"{header.pixel_count - state.remaining} of {header.pixel_count} pixels decoded"
            )

        px, count = decode_chunk(state, tag[0], source)

        # A run reaching past the last pixel is cut at the image size
        count = min(count, state.remaining)
        state.remaining -= count
        for _ in range(count):
            yield px

    if strict:
        marker = source.read(len(QOI.QOI_END_MARKER))
        if len(marker) < len(QOI.QOI_END_MARKER):
            raise UnexpectedEof("QOI.decode: The end marker is missing")
        if marker != QOI.QOI_END_MARKER:
            raise InvalidEndMarker(f"QOI.decode: Invalid end marker {marker.hex()}")


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) streams into pixels.
    """

    @staticmethod
    def open_stream(source, strict: bool = True):
        """
        Parse the header now and return it with a lazy iterator over the pixels.

        Decoding errors are raised while iterating. The iterator is single
        pass; stop consuming it early and the rest of the stream is never read.

        :param source: bytes-like object or binary file-like object.
        :param strict: require the end marker after the last pixel.
        :return: (QOIHeader, pixel iterator)
        """
        source = ByteSource(source)
        header = parse(source.read(QOI.QOI_HEADER_SIZE))
        return header, iter_decoded(header, source, strict)

    @staticmethod
    def decode(source, strict: bool = True):
        """
        Decode a whole QOI stream.

        :return: (width, height, list of Pixel) with exactly width * height pixels.
        """
        header, pixels = QOIDecoder.open_stream(source, strict)
        return header.width, header.height, list(pixels)

    @staticmethod
    def decode_bytes(file_data: bytes, output_channels: int = None, strict: bool = True) -> dict:
        """
        Decode a QOI file given as a bytes/bytearray object.

        :param file_data: Bytes containing the QOI file.
        :param output_channels: Number of channels to include in the decoded data (3 or 4).
                                If None, uses the channels defined in the file header.
        :return: Dictionary containing width, height, colorspace, channels, and data (bytes).
        """
        header, pixels = QOIDecoder.open_stream(file_data, strict)

        if output_channels is None:
            if header.channels not in QOI.QOI_CHANNELS:
                raise InvalidHeader(
                    f"QOI.decode: The number of channels declared in the file is invalid ({header.channels})"
                )
            output_channels = header.channels

        if output_channels not in QOI.QOI_CHANNELS:
            raise ValueError(
                "QOI.decode: The number of channels for the output is invalid"
            )

        result = bytearray()
        if output_channels == 4:
            for px in pixels:
                result.extend(px)
        else:
            for px in pixels:
                result.extend(px[:3])

        return {
            "width": header.width,
            "height": header.height,
            "colorspace": header.colorspace,
            "channels": output_channels,
            "data": bytes(result),
        }

    @staticmethod
    def decode_file(path, strict: bool = True):
        """Decode the .qoi file at ``path``; same result as ``decode``."""
        try:
            f = open(path, "rb")
        except OSError as err:
            raise IoError(f"QOI.decode: could not open {path}: {err}") from err

        with f:
            return QOIDecoder.decode(f, strict)


decode = QOIDecoder.decode
decode_bytes = QOIDecoder.decode_bytes
decode_file = QOIDecoder.decode_file
open_stream = QOIDecoder.open_stream
