import logging
import struct
from typing import Optional

from mps_errors import InvalidArgument

# largest component value for each supported bits-per-component depth
PAL_MAX = {4: 15, 6: 63, 8: 255}


def convert_palette(
    pal: bytes,
    src_bits: int,
    dst_bits: int,
    out: Optional[bytearray] = None,
    wrap: bool = False,
) -> bytearray:
    """Rescale every R, G and B component from src_bits to dst_bits.

    Uses truncating integer math (in * max_out // max_in), the same as the
    DOS tools, so the results match theirs bit for bit. out may be pal itself
    to convert in place.

    Components above the src_bits maximum raise InvalidArgument, unless wrap
    is set, then they are scaled anyway and stored modulo 256 like the DOS
    tools did.
    """
    if src_bits not in PAL_MAX or dst_bits not in PAL_MAX:
        raise InvalidArgument(f"Unsupported palette depth: {src_bits} -> {dst_bits}")
    if len(pal) % 3:
        raise InvalidArgument(f"Palette length {len(pal)} is not a multiple of 3")

    max_in = PAL_MAX[src_bits]
    max_out = PAL_MAX[dst_bits]

    if out is None:
        out = bytearray(len(pal))
    elif len(out) < len(pal):
        raise InvalidArgument(f"Output buffer too small: {len(out)} < {len(pal)}")

    for i, comp in enumerate(pal):
        if comp > max_in:
            if not wrap:
                raise InvalidArgument(
                    f"Palette entry {i // 3} component {comp} out of range "
                    f"for {src_bits} bit palette"
                )
            logging.warning(
                f"Palette entry {i // 3} component {comp} out of range "
                f"for {src_bits} bit palette, wrapping"
            )
        out[i] = (comp * max_out // max_in) & 0xFF
    return out


def pal2tpal(pal: bytes) -> list[tuple[int, int, int]]:
    """Convert a bytes pal to a list of tuples pal"""
    return [struct.unpack("<BBB", pal[i : i + 3]) for i in range(0, len(pal), 3)]


def pal_to_bytes(pal: list[tuple[int, int, int]]) -> bytes:
    """Inverse of pal2tpal"""
    return b"".join([struct.pack("<BBB", *p) for p in pal])
