import numpy as np
from PIL import Image

from .pixel import iter_pixels


def load_image(filepath: str) -> tuple[np.ndarray, dict]:
    """Load an image and return pixel data as numpy array + description."""

    ext = filepath.lower().split(".")[-1]

    if ext in ("dng", "cr2", "nef", "arw", "raw"):
        # RAW formats - requires rawpy
        import rawpy

        with rawpy.imread(filepath) as raw:
            rgb = raw.postprocess()
        img = Image.fromarray(rgb)
    else:
        # Standard formats (PNG, JPEG, etc.)
        img = Image.open(filepath)

    # Convert to RGB or RGBA
    if img.mode == "RGBA":
        channels = 4
    else:
        img = img.convert("RGB")
        channels = 3

    return np.array(img), {
        "width": img.size[0],
        "height": img.size[1],
        "channels": channels,
        "colorspace": 0,
    }


def pixels_from_array(pixel_data: np.ndarray) -> list:
    """Flatten an HxWx3 or HxWx4 uint8 array into a raster-order list of Pixels."""
    if pixel_data.ndim != 3 or pixel_data.shape[2] not in (3, 4):
        raise ValueError(f"Expected an HxWx3 or HxWx4 array, got shape {pixel_data.shape}")

    channels = pixel_data.shape[2]
    return list(iter_pixels(pixel_data.astype(np.uint8).tobytes(), channels))


def pixels_to_array(pixels, width: int, height: int, channels: int = 4) -> np.ndarray:
    """Inverse of pixels_from_array."""
    return np.frombuffer(pixels_to_bytes(pixels, channels), dtype=np.uint8).reshape(
        height, width, channels
    )


def pixels_to_bytes(pixels, channels: int = 4) -> bytes:
    result = bytearray()
    for px in pixels:
        result.extend(px[:channels])
    return bytes(result)


def positioned(pixels, width: int):
    """Yield ``(x, y, pixel)`` for raster-order pixels of an image ``width`` wide."""
    x = y = 0
    for px in pixels:
        yield x, y, px
        x += 1
        if x == width:
            x = 0
            y += 1