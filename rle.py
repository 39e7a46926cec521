# MPSShow RLE: a stream of 16 bit records, (count, value).
# Every record writes value count times, a count of 0 writes nothing.
import logging

from mps_errors import DecompressionOverflow

MAX_RUN = 255


def decode(codedData: bytes, dst: bytearray, pos: int = 0) -> int:
    """Decode codedData into dst starting at pos, returns the final write position.

    Raises DecompressionOverflow as soon as a run would go past the end of dst,
    whatever was written before that point should be treated as garbage.
    """
    capacity = len(dst)
    codedLen = len(codedData)
    if codedLen % 2:
        logging.warning(f"odd RLE length {codedLen}, ignoring trailing byte")
        codedLen -= 1

    i = 0
    while i < codedLen:
        count = codedData[i]
        val = codedData[i + 1]
        i += 2
        if count == 0:
            continue
        if pos + count > capacity:
            raise DecompressionOverflow(
                f"run of {count} at {pos} overflows {capacity} byte buffer "
                f"(input pos {i - 2})"
            )
        dst[pos : pos + count] = bytes((val,)) * count
        pos += count
    return pos


def encode(plainData: bytes) -> bytes:
    codedData = bytearray()
    i = 0
    plainDataLen = len(plainData)
    while i < plainDataLen:
        val = plainData[i]
        repeatCount = 1
        while (
            i + repeatCount < plainDataLen
            and plainData[i + repeatCount] == val
            and repeatCount < MAX_RUN
        ):
            repeatCount += 1
        codedData += bytes((repeatCount, val))
        i += repeatCount
    return bytes(codedData)
