#! Since our QOI is in Python, and Pillow is in C, the performance difference will be significant, hence the comparison isn't entirely fair.
#! Use python's qoi (https://pypi.org/project/qoi/) package which is a C extension for a fairer comparison.

import io
import sys
import time

import numpy as np
import qoi as OfficialQOI
from PIL import Image

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .utils import load_image

INPUT_IMAGE = "fruits.png"


def time_compare(pixel_data: np.ndarray, desc: dict) -> dict:
    results = {}

    # Encode to QOI in pure Python (our implementation)
    start_time = time.time()
    encoded = QOIEncoder.encode_bytes(pixel_data.tobytes(), desc)
    end_time = time.time()
    results["qoichunk"] = (len(encoded), end_time - start_time)
    print(f"Encoded QOI (qoichunk) to {len(encoded)} bytes in {end_time - start_time:.2f} seconds")

    start_time = time.time()
    QOIDecoder.decode_bytes(encoded)
    end_time = time.time()
    print(f"Decoded QOI (qoichunk) in {end_time - start_time:.2f} seconds")

    # Encode to QOI in C using the qoi package
    start_time = time.time()
    official = OfficialQOI.encode(np.ascontiguousarray(pixel_data))
    end_time = time.time()
    results["qoi"] = (len(official), end_time - start_time)
    print(f"Encoded QOI (qoi) to {len(official)} bytes in {end_time - start_time:.2f} seconds")

    # Encode to PNG in C using Pillow
    start_time = time.time()
    buffer = io.BytesIO()
    Image.fromarray(pixel_data).save(buffer, format="PNG")
    end_time = time.time()
    results["png"] = (buffer.tell(), end_time - start_time)
    print(f"Encoded PNG to {buffer.tell()} bytes in {end_time - start_time:.2f} seconds")

    return results


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else INPUT_IMAGE
    pixel_data, desc = load_image(path)
    print(
        f"Loaded image {path}: {desc['width']}x{desc['height']} Channels: {desc['channels']}"
    )
    print(f"Original {path} {pixel_data.nbytes} bytes")

    time_compare(pixel_data, desc)
