from io import BytesIO

import pytest

import mps
import rle
from conftest import build_container, gradient_palette
from mps_errors import (
    AllocationFailure,
    DecompressionOverflow,
    InvalidIndex,
    MalformedHeader,
    OpenFailure,
    TruncatedRead,
)
from mps_headers import (
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    MPS_RECORD_SIZE,
    make_record,
    pack_record,
    parse_record,
    record_desc,
    record_name,
)


def test_record_size():
    assert MPS_RECORD_SIZE == 835


def test_record_field_offsets():
    rec = make_record(
        "TITLE", "Strike Eagle III", 0x01020304, 0x0506, gradient_palette(),
        mode=0x13, unknown32=0xDEADBEEF, unknown=bytes(range(19)),
    )
    raw = pack_record(rec)
    assert len(raw) == 835
    assert raw[0] == 5 and raw[1:6] == b"TITLE"
    assert raw[10] == 16 and raw[11:27] == b"Strike Eagle III"
    assert raw[36:40] == bytes([4, 3, 2, 1])
    assert raw[40:42] == bytes([0x13, 0])
    assert raw[42:44] == bytes([6, 5])
    assert raw[44:48] == bytes([0xEF, 0xBE, 0xAD, 0xDE])
    assert raw[48:816] == gradient_palette()
    assert raw[816:] == bytes(range(19))
    assert parse_record(raw) == rec


def test_name_length_is_clamped():
    raw = bytearray(pack_record(make_record("ABC", "x", 0, 0, bytes(768))))
    raw[0] = 200
    raw[10] = 99
    rec = parse_record(bytes(raw))
    assert record_name(rec) == "ABC" + "\x00" * 6
    assert len(record_desc(rec)) == 25


def test_read_info_header(container):
    records = mps.read_info_header(container)
    assert len(records) == 2
    assert [record_name(r) for r in records] == ["SLIDE1", "SLIDE2"]
    assert record_desc(records[1]) == "SLIDE2 description"
    assert records[0].img_offset == 1 + 2 * 835
    assert records[1].img_offset == records[0].img_offset + records[0].img_len
    assert container.tell() == 1 + 2 * 835


def test_zero_count():
    with pytest.raises(MalformedHeader):
        mps.read_info_header(BytesIO(b"\x00" + bytes(835)))


def test_empty_stream():
    with pytest.raises(MalformedHeader):
        mps.read_info_header(BytesIO(b""))


def test_truncated_directory():
    rec = pack_record(make_record("A", "a", 0, 0, bytes(768)))
    data = b"\x03" + rec + rec
    with pytest.raises(TruncatedRead):
        mps.read_info_header(BytesIO(data))


def test_partial_record():
    rec = pack_record(make_record("A", "a", 0, 0, bytes(768)))
    with pytest.raises(TruncatedRead):
        mps.read_info_header(BytesIO(b"\x01" + rec[:-1]))


def test_read_image(container, rasters):
    records = mps.read_info_header(container)
    raster = mps.new_raster()
    for rec, expected in zip(reversed(records), reversed(rasters)):
        assert mps.read_image(container, rec, raster) is raster
        assert raster == expected


def test_read_image_resets_raster():
    data = build_container([bytes([10, 7])])
    f = BytesIO(data)
    records = mps.read_info_header(f)
    raster = bytearray(b"\xff" * (IMAGE_WIDTH * IMAGE_HEIGHT))
    mps.read_image(f, records[0], raster)
    assert raster[:10] == b"\x07" * 10
    assert raster[10:] == bytes(IMAGE_WIDTH * IMAGE_HEIGHT - 10)


def test_read_image_truncated_blob(rasters):
    data = build_container([rle.encode(rasters[0])])
    f = BytesIO(data[:-2])
    records = mps.read_info_header(f)
    with pytest.raises(TruncatedRead):
        mps.read_image(f, records[0], mps.new_raster())


def test_read_image_overflow():
    blob = bytes([255, 1]) * 251
    f = BytesIO(build_container([blob]))
    records = mps.read_info_header(f)
    with pytest.raises(DecompressionOverflow):
        mps.read_image(f, records[0], mps.new_raster())


def test_get_record(container):
    records = mps.read_info_header(container)
    assert mps.get_record(records, 1) is records[0]
    assert mps.get_record(records, 2) is records[1]
    for bad in (0, 3, -1):
        with pytest.raises(InvalidIndex):
            mps.get_record(records, bad)


def test_open_container(container_file):
    with mps.open_container(str(container_file)) as (f, records):
        assert [record_name(r) for r in records] == ["TITLE", "COCKPIT"]
    assert f.closed


def test_open_container_closes_on_error(tmp_path):
    path = tmp_path / "empty.mps"
    path.write_bytes(b"")
    with pytest.raises(MalformedHeader):
        with mps.open_container(str(path)):
            pass


def test_open_missing_container(tmp_path):
    with pytest.raises(OpenFailure):
        with mps.open_container(str(tmp_path / "missing.mps")):
            pass


def test_slide_palette(container):
    rec = mps.read_info_header(container)[0]
    pal = mps.slide_palette(rec)
    assert len(pal) == 768
    # entry 32 is (32, 8, 31)
    assert list(pal[96:99]) == [129, 32, 125]


def test_to_image(container, rasters):
    records = mps.read_info_header(container)
    raster = mps.read_image(container, records[1], mps.new_raster())
    image = mps.to_image(raster, records[1])
    assert image.mode == "P"
    assert image.size == (320, 200)
    assert image.getpixel((5, 0)) == rasters[1][0]
    assert image.getpalette()[0:3] == [0, 0, 255]


def test_new_raster():
    assert mps.new_raster() == bytes(IMAGE_WIDTH * IMAGE_HEIGHT)
    assert len(mps.new_raster(4, 2)) == 8


def test_new_raster_allocation_failure(monkeypatch):
    def out_of_memory(size):
        raise MemoryError()

    # shadows the builtin inside mps only
    monkeypatch.setattr(mps, "bytearray", out_of_memory, raising=False)
    with pytest.raises(AllocationFailure):
        mps.new_raster()


def test_slide_palette_wraps_stray_components():
    pal = bytearray(gradient_palette())
    pal[0] = 64
    rec = make_record("ODD", "odd", 0, 0, bytes(pal))
    assert mps.slide_palette(rec)[0] == 3
