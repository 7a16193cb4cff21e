from .cache import PixelCache
from .decoder import QOIDecoder, decode, decode_bytes, decode_file, open_stream
from .encoder import QOIEncoder, encode, encode_bytes, encode_file
from .errors import (
    InvalidDimensions,
    InvalidEndMarker,
    InvalidHeader,
    IoError,
    PixelCountMismatch,
    QOIError,
    TruncatedOpcode,
    UnexpectedEof,
)
from .header import QOIHeader
from .pixel import Pixel
from .qoi import QOI
from .utils import load_image

__all__ = [
    "QOIEncoder",
    "QOIDecoder",
    "QOI",
    "QOIHeader",
    "Pixel",
    "PixelCache",
    "encode",
    "encode_bytes",
    "encode_file",
    "decode",
    "decode_bytes",
    "decode_file",
    "open_stream",
    "QOIError",
    "InvalidHeader",
    "InvalidDimensions",
    "InvalidEndMarker",
    "PixelCountMismatch",
    "UnexpectedEof",
    "TruncatedOpcode",
    "IoError",
    "load_image",
]
