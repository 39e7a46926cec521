from io import BytesIO

import pytest

import rle
from mps_headers import (
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    MPS_RECORD_SIZE,
    make_record,
    pack_record,
)


def gradient_palette() -> bytes:
    """6 bit palette where entry i is (i % 64, (i // 4) % 64, 63 - i % 64)"""
    return bytes(c for i in range(256) for c in (i % 64, (i // 4) % 64, 63 - i % 64))


def stripes_raster(seed: int = 0) -> bytes:
    # every row is a solid colour so runs cross row boundaries
    return bytes((y + seed) % 256 for y in range(IMAGE_HEIGHT) for _ in range(IMAGE_WIDTH))


def build_container(blobs, names=None) -> bytes:
    """Pack already compressed images into an MPS container"""
    names = names or [f"SLIDE{i + 1}" for i in range(len(blobs))]
    offset = 1 + MPS_RECORD_SIZE * len(blobs)
    header = bytearray([len(blobs)])
    for name, blob in zip(names, blobs):
        header += pack_record(
            make_record(name, f"{name} description", offset, len(blob), gradient_palette())
        )
        offset += len(blob)
    return bytes(header) + b"".join(blobs)


@pytest.fixture
def palette6():
    return gradient_palette()


@pytest.fixture
def rasters():
    return [stripes_raster(0), stripes_raster(100)]


@pytest.fixture
def container(rasters):
    return BytesIO(build_container([rle.encode(r) for r in rasters]))


@pytest.fixture
def container_file(tmp_path, rasters):
    path = tmp_path / "F15STORM.MPS"
    path.write_bytes(build_container([rle.encode(r) for r in rasters], ["TITLE", "COCKPIT"]))
    return path
