class QOI:
    # QOI Constants
    QOI_OP_INDEX = 0x00  # 00xxxxxx
    QOI_OP_DIFF = 0x40  # 01xxxxxx
    QOI_OP_LUMA = 0x80  # 10xxxxxx
    QOI_OP_RUN = 0xC0  # 11xxxxxx
    QOI_OP_RGB = 0xFE  # 11111110
    QOI_OP_RGBA = 0xFF  # 11111111

    QOI_MASK_2 = 0xC0
    QOI_MASK_6 = 0x3F

    QOI_MAGIC = b"qoif"
    QOI_HEADER_SIZE = 14
    QOI_HEADER_FORMAT = ">4sIIBB"
    QOI_END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"

    QOI_INDEX_SIZE = 64
    QOI_RUN_MAX = 62
    QOI_DIMENSION_MAX = 0xFFFFFFFF

    QOI_CHANNELS = (3, 4)
    QOI_SRGB = 0
    QOI_LINEAR = 1
    QOI_COLORSPACES = (QOI_SRGB, QOI_LINEAR)

    # Previous pixel at the start of every stream: opaque black
    QOI_START_PIXEL = (0, 0, 0, 255)
