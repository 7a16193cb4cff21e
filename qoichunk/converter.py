import argparse
import sys

from PIL import Image

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .errors import QOIError
from .header import parse
from .qoi import QOI


def png_to_qoi(png_path, qoi_path, colorspace=QOI.QOI_SRGB):
    img = Image.open(png_path)
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
    width, height = img.size
    raw_data = img.tobytes()

    encoded = QOIEncoder.encode_bytes(
        raw_data,
        {
            "width": width,
            "height": height,
            "channels": len(img.getbands()),
            "colorspace": colorspace,
        },
    )

    with open(qoi_path, "wb") as f:
        f.write(encoded)
    print(f"Converted {png_path} to {qoi_path} ({len(encoded)} bytes)")
    return len(encoded)


def qoi_to_png(qoi_path, png_path):
    with open(qoi_path, "rb") as f:
        content = f.read()

    decoded = QOIDecoder.decode_bytes(content)
    mode = "RGBA" if decoded["channels"] == 4 else "RGB"

    img = Image.frombytes(
        mode, (decoded["width"], decoded["height"]), bytes(decoded["data"])
    )
    img.save(png_path)
    print(f"Converted {qoi_path} to {png_path}")


def qoi_info(qoi_path):
    with open(qoi_path, "rb") as f:
        header = parse(f.read(QOI.QOI_HEADER_SIZE))

    print(
        f"{qoi_path}: {header.width}x{header.height} "
        f"Channels: {header.channels} Colorspace: {header.colorspace}"
    )
    return header


def build_parser():
    parser = argparse.ArgumentParser(
        prog="qoichunk", description="Convert images to and from the QOI format."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    encode = commands.add_parser("encode", help="PNG (or any Pillow format) to QOI")
    encode.add_argument("input")
    encode.add_argument("output")
    encode.add_argument(
        "--linear",
        action="store_true",
        help="mark all channels as linear (colorspace 1) instead of sRGB",
    )

    decode = commands.add_parser("decode", help="QOI to PNG")
    decode.add_argument("input")
    decode.add_argument("output")

    info = commands.add_parser("info", help="print the QOI header")
    info.add_argument("input")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        if args.command == "encode":
            colorspace = QOI.QOI_LINEAR if args.linear else QOI.QOI_SRGB
            png_to_qoi(args.input, args.output, colorspace)
        elif args.command == "decode":
            qoi_to_png(args.input, args.output)
        else:
            qoi_info(args.input)
    except (QOIError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
