#!/usr/bin/env python3

import argparse
import logging
import sys

import mps
from mps_errors import MpsError, OpenFailure, WriteFailure
from mps_headers import record_name
from shared import convert_palette, pal2tpal


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Extract the palette of a slide in an MPSShow (.MPS) file"
    )
    parser.add_argument("file", help="The MPS file to extract from.")
    parser.add_argument("extract", type=int, help="Index of the slide, from 1.")
    parser.add_argument("-o", "--output", help="Ouput filename", default=None)
    parser.add_argument(
        "--bits",
        type=int,
        choices=[4, 6, 8],
        default=6,
        help="Bits per component to save, the slides store 6.",
    )
    parser.add_argument(
        "--tr", action="store_true", help="Save as a text .tr palette."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose mode."
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        with mps.open_container(args.file) as (_, records):
            slide = mps.get_record(records, args.extract)
        pal = convert_palette(slide.palette, 6, args.bits)
        ext = ".tr" if args.tr else ".PAL"
        out = args.output if args.output else f"{record_name(slide)}{ext}"
        print(f"Saving: '{out}'")
        if args.tr:
            save_tr(out, pal)
        else:
            save_pal(out, pal)
    except MpsError as e:
        logging.error(e)
        return 1
    return 0


def save_pal(fn: str, pal: bytes):
    try:
        f = open(fn, "wb")
    except OSError as e:
        raise OpenFailure(f"Unable to create {fn}: {e}") from e
    try:
        with f:
            f.write(pal)
    except OSError as e:
        raise WriteFailure(f"Unable to write {fn}: {e}") from e


# format "pal# - val1 val2 val3"
def save_tr(fn: str, pal: bytes):
    try:
        f = open(fn, "w")
    except OSError as e:
        raise OpenFailure(f"Unable to create {fn}: {e}") from e
    try:
        with f:
            for i, rgb in enumerate(pal2tpal(pal)):
                f.write(f"{i} - {' '.join([str(x) for x in rgb])}\n")
    except OSError as e:
        raise WriteFailure(f"Unable to write {fn}: {e}") from e


if __name__ == "__main__":
    sys.exit(main())
