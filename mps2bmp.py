#!/usr/bin/env python3

import argparse
import logging
import sys

import mps
from bmp import save_bmp
from mps_errors import MpsError, WriteFailure
from mps_headers import IMAGE_HEIGHT, IMAGE_WIDTH, record_desc, record_name


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="List or extract the slides in an MPSShow (.MPS) file"
    )
    parser.add_argument("file", help="The MPS file to extract from.")
    parser.add_argument(
        "extract",
        nargs="?",
        type=int,
        default=None,
        help="Index of the slide to extract, 0 extracts all of them. "
        "If omitted the slides are listed.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output filename, ignored when extracting all slides",
        default=None,
    )
    parser.add_argument(
        "--png", action="store_true", help="Save PNG files instead of BMP."
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="Skip slides that fail to convert instead of stopping.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable verbose mode. Can be specified multiple times.",
    )
    args = parser.parse_args(argv)

    if args.verbose >= 2:
        logging.basicConfig(level=logging.DEBUG)
    elif args.verbose == 1:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        with mps.open_container(args.file) as (f, records):
            if args.extract is None:
                list_slides(records)
                return 0
            if args.extract == 0:
                return extract_all(f, records, args.png, args.keep_going)
            slide = mps.get_record(records, args.extract)
            extract_slide(f, slide, args.output, args.png)
    except MpsError as e:
        logging.error(e)
        return 1
    return 0


def list_slides(records):
    for i, rec in enumerate(records):
        print(
            f"{i + 1:2d}: {record_name(rec):>9} - {record_desc(rec):<25} "
            f"ofs:{rec.img_offset:06x} len:{rec.img_len:<6d} "
            f"mode:{rec.mode:02x}h [{rec.unknown32:08x}]"
        )


def output_name(slide, png: bool) -> str:
    return f"{record_name(slide)}{'.png' if png else '.BMP'}"


def extract_slide(f, slide, out=None, png=False, raster=None) -> str:
    if out is None:
        out = output_name(slide, png)
    if raster is None:
        raster = mps.new_raster()

    print(f"Saving: '{out}'")
    mps.read_image(f, slide, raster)
    if png:
        try:
            mps.to_image(raster, slide).save(out)
        except OSError as e:
            raise WriteFailure(f"Unable to write {out}: {e}") from e
    else:
        save_bmp(out, raster, IMAGE_WIDTH, IMAGE_HEIGHT, mps.slide_palette(slide))
    return out


def extract_all(f, records, png=False, keep_going=False) -> int:
    raster = mps.new_raster()
    failed = 0
    for i, slide in enumerate(records):
        try:
            extract_slide(f, slide, None, png, raster)
        except MpsError as e:
            if not keep_going:
                raise
            logging.error(f"slide {i + 1} ({record_name(slide)}): FAIL {e}")
            failed += 1
    if failed:
        logging.warning(f"{failed} of {len(records)} slides failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
