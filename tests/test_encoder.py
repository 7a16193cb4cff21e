import io

import pytest

from helpers import qoi_stream
from qoichunk import (
    InvalidDimensions,
    InvalidHeader,
    IoError,
    Pixel,
    PixelCountMismatch,
    QOIEncoder,
    encode,
)
from qoichunk.qoi import QOI


def encode_to_bytes(width, height, pixels, **kwargs):
    sink = io.BytesIO()
    size = encode(width, height, pixels, sink, **kwargs)
    data = sink.getvalue()
    assert size == len(data), "Returned byte count differs from what was written"
    return data


def test_single_start_pixel_is_a_run():
    """The first pixel equal to the implicit previous pixel becomes RUN(1)."""
    data = encode_to_bytes(1, 1, [(0, 0, 0, 255)])
    assert data == qoi_stream(1, 1, [0xC0])


def test_solid_image_is_diff_then_run():
    data = encode_to_bytes(2, 2, [(255, 0, 0, 255)] * 4)
    # (255,0,0) is (-1,0,0) away from opaque black, then three repeats
    assert data == qoi_stream(2, 2, [0x5A, 0xC2])


def test_small_deltas():
    pixels = [(10, 10, 10, 255), (11, 11, 12, 255), (9, 9, 10, 255)]
    data = encode_to_bytes(3, 1, pixels)
    assert data == qoi_stream(3, 1, [0xAA, 0x88, 0xA1, 0x89, 0x40])


def test_alpha_change_forces_rgba():
    data = encode_to_bytes(2, 1, [(0, 0, 0, 0), (0, 0, 0, 255)])
    # Transparent black sits in slot 0 of the fresh cache
    assert data == qoi_stream(2, 1, [0x00, 0xFF, 0, 0, 0, 255])


def test_alpha_change_never_uses_delta_opcodes():
    pixels = [(10, 10, 10, 255), (10, 10, 10, 254), (10, 10, 10, 254), (11, 10, 10, 253)]
    data = encode_to_bytes(4, 1, pixels)
    assert data == qoi_stream(
        4, 1, [0xAA, 0x88, 0xFF, 10, 10, 10, 254, 0xC0, 0xFF, 11, 10, 10, 253]
    )


def test_run_of_62_is_one_opcode():
    data = encode_to_bytes(62, 1, [(0, 0, 0, 255)] * 62)
    assert data == qoi_stream(62, 1, [0xFD])


def test_run_of_63_is_split():
    data = encode_to_bytes(63, 1, [(0, 0, 0, 255)] * 63)
    assert data == qoi_stream(63, 1, [0xFD, 0xC0])


def test_run_of_124_is_two_full_runs():
    data = encode_to_bytes(4, 31, [(0, 0, 0, 255)] * 124)
    assert data == qoi_stream(4, 31, [0xFD, 0xFD])


def test_run_is_flushed_before_a_new_pixel():
    pixels = [(255, 0, 0, 255)] * 3 + [(0, 0, 0, 255)]
    data = encode_to_bytes(4, 1, pixels)
    assert data == qoi_stream(4, 1, [0x5A, 0xC1, 0x7A])


def test_index_hit():
    pixels = [(10, 10, 10, 255), (50, 60, 70, 255), (10, 10, 10, 255)]
    data = encode_to_bytes(3, 1, pixels)
    assert data == qoi_stream(3, 1, [0xAA, 0x88, 0xFE, 50, 60, 70, 0x0B])


def test_boundary_deltas():
    pixels = [
        (254, 1, 254, 255),  # DIFF (-2, +1, -2)
        (36, 32, 21, 255),  # LUMA dg=+31, dr-dg=+7, db-dg=-8
        (252, 0, 252, 255),  # LUMA dg=-32, dr-dg=-8, db-dg=+7
    ]
    data = encode_to_bytes(3, 1, pixels)
    assert data == qoi_stream(3, 1, [0x4C, 0xBF, 0xF0, 0x80, 0x0F])


def test_green_delta_out_of_luma_range_is_rgb():
    data = encode_to_bytes(1, 1, [(32, 32, 32, 255)])
    assert data == qoi_stream(1, 1, [0xFE, 32, 32, 32])


def test_deltas_wrap_around():
    # 0 -> 255 is a delta of -1, not +255
    data = encode_to_bytes(1, 1, [(255, 255, 255, 255)])
    assert data == qoi_stream(1, 1, [0x40 | (1 << 4) | (1 << 2) | 1])


def test_accepts_generators_and_rgb_tuples():
    pixels = (Pixel.rgb(255, 0, 0) if i % 2 else (0, 0, 0) for i in range(4))
    data = encode_to_bytes(2, 2, pixels)
    expected = encode_to_bytes(2, 2, [(0, 0, 0, 255), (255, 0, 0, 255)] * 2)
    assert data == expected


def test_header_carries_channels_and_colorspace():
    data = encode_to_bytes(1, 1, [(1, 2, 3)], channels=3, colorspace=QOI.QOI_LINEAR)
    assert data[:14] == b"qoif\x00\x00\x00\x01\x00\x00\x00\x01\x03\x01"


@pytest.mark.parametrize("count", [0, 3, 5])
def test_pixel_count_mismatch_writes_nothing(count):
    sink = io.BytesIO()
    with pytest.raises(PixelCountMismatch) as info:
        encode(2, 2, [(0, 0, 0, 255)] * count, sink)
    assert info.value.expected == 4
    assert sink.getvalue() == b"", "Sink must stay untouched on a count mismatch"


@pytest.mark.parametrize("count", [3, 5])
def test_pixel_count_mismatch_from_iterator(count):
    sink = io.BytesIO()
    with pytest.raises(PixelCountMismatch):
        encode(2, 2, iter([(0, 0, 0, 255)] * count), sink)
    assert sink.getvalue() == b""


def test_pixel_count_mismatch_is_a_value_error():
    with pytest.raises(ValueError):
        encode(1, 1, [], io.BytesIO())


@pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (2**32, 1)])
def test_invalid_dimensions(width, height):
    with pytest.raises(InvalidDimensions):
        encode(width, height, [], io.BytesIO())


def test_invalid_channels_and_colorspace():
    with pytest.raises(InvalidHeader):
        encode(1, 1, [(0, 0, 0)], io.BytesIO(), channels=2)
    with pytest.raises(InvalidHeader):
        encode(1, 1, [(0, 0, 0)], io.BytesIO(), colorspace=2)


def test_rejects_bad_pixels():
    with pytest.raises(ValueError):
        encode(1, 1, [(0, 0, 256)], io.BytesIO())
    with pytest.raises(ValueError):
        encode(1, 1, [(0, 0)], io.BytesIO())


@pytest.mark.parametrize("px", [Pixel(-1, 0, 0, 255), Pixel(0, 0, 0, 256)])
def test_rejects_out_of_range_pixel_instances(px):
    sink = io.BytesIO()
    with pytest.raises(ValueError, match="outside 0..255"):
        encode(1, 1, [px], sink)
    assert sink.getvalue() == b""


def test_short_writes_are_retried():
    class Dribble:
        """Accepts at most three bytes per write, like a raw file or socket."""

        def __init__(self):
            self.data = bytearray()

        def write(self, data):
            chunk = bytes(data[:3])
            self.data.extend(chunk)
            return len(chunk)

    sink = Dribble()
    size = encode(2, 2, [(255, 0, 0, 255)] * 4, sink)
    assert bytes(sink.data) == qoi_stream(2, 2, [0x5A, 0xC2])
    assert size == len(sink.data)


def test_sink_accepting_nothing_is_io_error():
    class Stuck:
        def write(self, data):
            return 0

    with pytest.raises(IoError):
        encode(1, 1, [(0, 0, 0, 255)], Stuck())


def test_sink_failure_is_io_error():
    class BrokenSink:
        def write(self, data):
            raise OSError("disk full")

    with pytest.raises(IoError) as info:
        encode(1, 1, [(0, 0, 0, 255)], BrokenSink())
    assert isinstance(info.value, OSError)
    assert isinstance(info.value.__cause__, OSError)


def test_encode_bytes_rgb():
    desc = {"width": 2, "height": 1, "channels": 3, "colorspace": 0}
    data = QOIEncoder.encode_bytes(bytes([0, 0, 0, 255, 0, 0]), desc)
    assert data == qoi_stream(2, 1, [0xC0, 0x5A], channels=3)


def test_encode_bytes_length_check():
    desc = {"width": 2, "height": 1, "channels": 4, "colorspace": 0}
    with pytest.raises(PixelCountMismatch):
        QOIEncoder.encode_bytes(bytes(7), desc)


def test_encode_file(tmp_path):
    path = tmp_path / "red.qoi"
    size = QOIEncoder.encode_file(path, 2, 2, [(255, 0, 0, 255)] * 4)
    assert path.read_bytes() == qoi_stream(2, 2, [0x5A, 0xC2])
    assert size == path.stat().st_size
