import numpy as np

from qoichunk.header import serialize
from qoichunk.qoi import QOI


def make_image(width, height, channels=4, seed=0):
    """
    Small synthetic image mixing flat areas, gradients, a repeating palette and noise,
    so every opcode shows up when encoded.
    """
    rng = np.random.default_rng(seed)
    img = np.zeros((height, width, channels), dtype=np.uint8)

    palette = rng.integers(0, 256, size=(5, channels), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            band = (x + y * width) // 7 % 4
            if band == 0:
                img[y, x] = palette[(x // 3 + y) % len(palette)]
            elif band == 1:
                img[y, x] = (x * 3 + y) % 256
            elif band == 2:
                img[y, x] = rng.integers(0, 256, size=channels, dtype=np.uint8)
            else:
                img[y, x] = img[y, x - 1] if x else palette[0]

    if channels == 4:
        img[::3, ::5, 3] = 128
    return img


def qoi_stream(width, height, chunks, channels=4, end_marker=True):
    data = serialize(width, height, channels, QOI.QOI_SRGB) + bytes(chunks)
    if end_marker:
        data += QOI.QOI_END_MARKER
    return data
