# MPSShow data (.MPS) is a one byte slide count, followed by that many 835
# byte info records, followed by the RLE compressed slide images. Each info
# record holds the absolute offset and length of its image, and the 6 bit
# VGA palette used to display it.
from contextlib import contextmanager
from io import BufferedReader
import logging

from PIL import Image
from PIL.Image import Image as PILImage

import rle
from mps_errors import (
    AllocationFailure,
    InvalidIndex,
    MalformedHeader,
    OpenFailure,
    TruncatedRead,
)
from mps_headers import (
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    MPS_RECORD_SIZE,
    MpsRecord,
    parse_record,
    record_name,
)
from shared import convert_palette


def read_info_header(f: BufferedReader) -> list[MpsRecord]:
    """Read the slide count and all the info records, f must be at the start"""
    count = f.read(1)
    if not count:
        raise MalformedHeader("Unexpected end of file reading slide count")
    num_slides = count[0]
    if num_slides == 0:
        raise MalformedHeader("File contains no slides")
    logging.info(f"Number of slides: {num_slides}")

    expected = num_slides * MPS_RECORD_SIZE
    data = f.read(expected)
    if len(data) != expected:
        raise TruncatedRead(
            f"Info block for {num_slides} slides needs {expected} bytes, "
            f"got {len(data)}"
        )

    records = [
        parse_record(data[i : i + MPS_RECORD_SIZE])
        for i in range(0, expected, MPS_RECORD_SIZE)
    ]
    for rec in records:
        logging.debug(
            f"{record_name(rec)}: ofs:{rec.img_offset:06x} len:{rec.img_len} "
            f"mode:{rec.mode:02x}"
        )
    return records


def new_raster(width: int = IMAGE_WIDTH, height: int = IMAGE_HEIGHT) -> bytearray:
    try:
        return bytearray(width * height)
    except MemoryError as e:
        raise AllocationFailure(f"Unable to allocate {width}x{height} raster") from e


def read_image(f: BufferedReader, slide: MpsRecord, dst: bytearray) -> bytearray:
    """Load and decompress the image for slide into dst.

    dst is zeroed first, if the RLE stream is shorter than the raster the
    remaining pixels stay 0.
    """
    dst[:] = bytes(len(dst))

    f.seek(slide.img_offset)
    data = f.read(slide.img_len)
    if len(data) != slide.img_len:
        raise TruncatedRead(
            f"Image {record_name(slide)} at {slide.img_offset:#x} needs "
            f"{slide.img_len} bytes, got {len(data)}"
        )

    written = rle.decode(data, dst)
    logging.info(f"{record_name(slide)}: {slide.img_len} -> {written} bytes")
    if written < len(dst):
        logging.warning(
            f"{record_name(slide)}: image only filled {written} of {len(dst)} bytes"
        )
    return dst


def get_record(records: list[MpsRecord], index: int) -> MpsRecord:
    """Slides are numbered from 1, like the DOS tools"""
    if index < 1 or index > len(records):
        raise InvalidIndex(f"Slide index '{index}' out of range 1-{len(records)}")
    return records[index - 1]


@contextmanager
def open_container(path: str):
    try:
        f = open(path, "rb")
    except OSError as e:
        raise OpenFailure(f"Unable to open {path}: {e}") from e
    with f:
        yield f, read_info_header(f)


def slide_palette(slide: MpsRecord) -> bytearray:
    """The slide's VGA palette scaled up to 8 bits per component"""
    return convert_palette(slide.palette, 6, 8, wrap=True)


def to_image(src: bytes, slide: MpsRecord) -> PILImage:
    image = Image.frombytes("P", (IMAGE_WIDTH, IMAGE_HEIGHT), bytes(src))
    image.putpalette(bytes(slide_palette(slide)))
    return image
