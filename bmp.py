from collections import namedtuple
import logging
import struct

from mps_errors import AllocationFailure, InvalidArgument, OpenFailure, WriteFailure

# typedef struct { // BMP file header, 14 bytes
#     char sig[2];            // "BM"
#     uint32_t file_size;     // size of the whole file
#     uint16_t reserved1;
#     uint16_t reserved2;
#     uint32_t image_offset;  // offset to the pixel data
# } bmp_file_header_t;
BmpFileHeader = namedtuple(
    "BmpFileHeader", ["sig", "file_size", "reserved1", "reserved2", "image_offset"]
)
bmp_file_header_format = "<2sIHHI"

# typedef struct { // BITMAPINFOHEADER, 40 bytes
#     uint32_t header_size;
#     int32_t image_width;
#     int32_t image_height;     // positive, rows are stored bottom up
#     uint16_t num_planes;
#     uint16_t bits_per_pixel;
#     uint32_t compression;
#     uint32_t bitmap_size;     // stride * height
#     int32_t horiz_res;        // pixels per meter
#     int32_t vert_res;
#     uint32_t num_colors;
#     uint32_t important_colors;
# } bmi_header_t;
BmpInfoHeader = namedtuple(
    "BmpInfoHeader",
    [
        "header_size",
        "image_width",
        "image_height",
        "num_planes",
        "bits_per_pixel",
        "compression",
        "bitmap_size",
        "horiz_res",
        "vert_res",
        "num_colors",
        "important_colors",
    ],
)
bmp_info_header_format = "<IiiHHIIiiII"

BMP_SIG = b"BM"
BMP_96DPI = 3780  # 96 dots per inch in pixels per meter
BMP_COLORS = 256

FILE_HEADER_SIZE = struct.calcsize(bmp_file_header_format)
INFO_HEADER_SIZE = struct.calcsize(bmp_info_header_format)
PALETTE_SIZE = BMP_COLORS * 4
IMAGE_OFFSET = FILE_HEADER_SIZE + INFO_HEADER_SIZE + PALETTE_SIZE


def stride(width: int) -> int:
    # rows are padded out to 32 bit boundaries
    return (width + 3) & ~3


def _check_args(src, width: int, height: int, pal) -> None:
    if src is None or pal is None:
        raise InvalidArgument("Missing image data or palette")
    if width <= 0 or height <= 0:
        raise InvalidArgument(f"Invalid image size {width}x{height}")
    if len(src) < width * height:
        raise InvalidArgument(
            f"Image data too short: {len(src)} < {width * height} ({width}x{height})"
        )
    if len(pal) != BMP_COLORS * 3:
        raise InvalidArgument(f"Palette must be {BMP_COLORS * 3} bytes, got {len(pal)}")


def make_headers(width: int, height: int) -> bytes:
    bmp_img_sz = stride(width) * height
    file_header = BmpFileHeader(
        BMP_SIG, IMAGE_OFFSET + bmp_img_sz, 0, 0, IMAGE_OFFSET
    )
    info_header = BmpInfoHeader(
        INFO_HEADER_SIZE,
        width,
        height,
        1,  # always 1
        8,  # 256 colour image
        0,  # uncompressed
        bmp_img_sz,
        BMP_96DPI,
        BMP_96DPI,
        BMP_COLORS,
        0,  # all colours are important
    )
    return struct.pack(bmp_file_header_format, *file_header) + struct.pack(
        bmp_info_header_format, *info_header
    )


def make_palette(pal: bytes) -> bytes:
    """RGB triples (8 bits per component) to the BGR0 quads BMP expects"""
    return b"".join(
        struct.pack("<BBBB", pal[i + 2], pal[i + 1], pal[i], 0)
        for i in range(0, BMP_COLORS * 3, 3)
    )


def iter_rows(src: bytes, width: int, height: int):
    """Yield padded scanlines in BMP order, last row of the image first"""
    padding = b"\x00" * (stride(width) - width)
    for y in range(height - 1, -1, -1):
        yield bytes(src[y * width : (y + 1) * width]) + padding


def encode_bmp(src: bytes, width: int, height: int, pal: bytes) -> bytes:
    """Build a complete 8 bit indexed BMP in memory.

    src is width*height palette indexes, top row first with no padding, and
    pal is 256 RGB entries already scaled to 8 bits per component.
    """
    _check_args(src, width, height, pal)
    try:
        return (
            make_headers(width, height)
            + make_palette(pal)
            + b"".join(iter_rows(src, width, height))
        )
    except MemoryError as e:
        raise AllocationFailure(f"Unable to allocate {width}x{height} bitmap") from e


def save_bmp(fn: str, src: bytes, width: int, height: int, pal: bytes) -> None:
    """Write src as a BMP file, the file is left partially written on failure"""
    _check_args(src, width, height, pal)
    if not fn:
        raise InvalidArgument("Missing output filename")

    try:
        f = open(fn, "wb")
    except OSError as e:
        raise OpenFailure(f"Unable to create {fn}: {e}") from e

    try:
        with f:
            f.write(make_headers(width, height))
            f.write(make_palette(pal))
            for row in iter_rows(src, width, height):
                f.write(row)
    except MemoryError as e:
        raise AllocationFailure(f"Unable to allocate buffers for {fn}") from e
    except OSError as e:
        raise WriteFailure(f"Unable to write {fn}: {e}") from e

    logging.info(f"saved {fn}: {width}x{height}")
