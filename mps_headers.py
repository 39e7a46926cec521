from collections import namedtuple
import struct

IMAGE_WIDTH = 320
IMAGE_HEIGHT = 200
PALETTE_ENTRIES = 256

# typedef struct {  // MPSShow slide info record, 835 bytes packed
#     uint8_t name_len;       // pascal string length prefix
#     char    name[9];        // name of image file, without extension
#     uint8_t desc_len;       // pascal string length prefix
#     char    desc[25];       // brief description of the slide
#     uint32_t img_offset;    // offset of image in the file
#     uint16_t mode;          // unknown, 0x13 seen in every file so far
#     uint16_t img_len;       // length of compressed image data
#     uint32_t unknown32;     // looks to be uninitialized bytes
#     pal_t pal[256];         // R G B palette data (0-63 per component)
#     uint8_t unknown[19];    // likely show flow and control data
# } mps_info_t;
MpsRecord = namedtuple(
    "MpsRecord",
    [
        "name_len",
        "name",
        "desc_len",
        "desc",
        "img_offset",
        "mode",
        "img_len",
        "unknown32",
        "palette",
        "unknown",
    ],
)
# '9s' and '25s' keep the raw string fields, '768s' is the palette as a
# single bytes object and '19s' the trailing bytes we don't understand yet.
mps_record_format = "<B9sB25sIHHI768s19s"
MPS_RECORD_SIZE = struct.calcsize(mps_record_format)

NAME_SIZE = 9
DESC_SIZE = 25

assert MPS_RECORD_SIZE == 835


def parse_record(data: bytes) -> MpsRecord:
    return MpsRecord._make(struct.unpack(mps_record_format, data))


def pack_record(rec: MpsRecord) -> bytes:
    return struct.pack(mps_record_format, *rec)


def make_record(
    name: str,
    desc: str,
    img_offset: int,
    img_len: int,
    palette: bytes,
    mode: int = 0x13,
    unknown32: int = 0,
    unknown: bytes = b"\x00" * 19,
) -> MpsRecord:
    """Build a record from python values, string lengths are clamped to the field"""
    name_b = name.encode("latin-1")[:NAME_SIZE]
    desc_b = desc.encode("latin-1")[:DESC_SIZE]
    return MpsRecord(
        len(name_b),
        name_b.ljust(NAME_SIZE, b"\x00"),
        len(desc_b),
        desc_b.ljust(DESC_SIZE, b"\x00"),
        img_offset,
        mode,
        img_len,
        unknown32,
        bytes(palette),
        bytes(unknown),
    )


# the length prefix is untrusted, never go past the end of the field
def record_name(rec: MpsRecord) -> str:
    return rec.name[: min(rec.name_len, NAME_SIZE)].decode("latin-1")


def record_desc(rec: MpsRecord) -> str:
    return rec.desc[: min(rec.desc_len, DESC_SIZE)].decode("latin-1")
