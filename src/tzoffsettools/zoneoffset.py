#!/usr/bin/env python3
#
# Copyright 2018 Brian T. Park
#
# MIT License.

"""
Read the raw TZ Database files at the location specified by `--input_dir` (or
`--input_files`), and print the standard UTC offset of the zone or link given
by `--zone` at the civil time given by `--at` (default: now). DST rules are
not applied.

Example:
$ zoneoffset.py --input_dir ../tz --zone america/new_york --at 1960-01-01
"""

import argparse
import datetime
import logging
import sys

from tzoffsettools.data_types.tz_types import create_zone_offset_database
from tzoffsettools.transformer.transformer import Transformer
from tzoffsettools.tzcompiler import add_input_flags
from tzoffsettools.tzcompiler import extract
from tzoffsettools.tzcompiler import input_file_names
from tzoffsettools.zone_processor.offset_resolver import OffsetResolver


def format_offset(seconds: int) -> str:
    """Convert -18000 into '-05:00', and 20700 into '+05:45'."""
    sign = '-' if seconds < 0 else '+'
    seconds = abs(seconds)
    minutes, s = divmod(seconds, 60)
    h, m = divmod(minutes, 60)
    if s:
        return f'{sign}{h:02}:{m:02}:{s:02}'
    return f'{sign}{h:02}:{m:02}'


def main() -> None:
    parser = argparse.ArgumentParser(description='Print the UTC offset.')

    # Extractor flags.
    add_input_flags(parser)

    parser.add_argument(
        '--zone', help='Name of the zone or link (any case)', required=True)
    parser.add_argument(
        '--at',
        help='Civil date time in ISO 8601 format (default: now)',
        default='',
    )

    # Resolve 'lastSun' and 'Sun>=8' in UNTIL fields to the exact day,
    # instead of the first day of the month and the given day.
    parser.add_argument(
        '--exact_weekdays',
        help='Resolve the weekday of UNTIL fields exactly',
        action='store_true',
    )

    # Parse the command line arguments
    args = parser.parse_args()

    # Configure logging. This should normally be executed after the
    # parser.parse_args() because it allows us set the logging.level using a
    # flag.
    logging.basicConfig(level=logging.INFO)

    instant = (
        datetime.datetime.fromisoformat(args.at) if args.at
        else datetime.datetime.now()
    )

    data = extract(args.input_dir, args.input_files)
    transformer = Transformer()
    tresult = transformer.transform(data)
    zidb = create_zone_offset_database(
        tz_version='',
        tz_files=input_file_names(args.input_files),
        owner=transformer.owner,
        tresult=tresult,
    )
    resolver = OffsetResolver(zidb, exact_weekdays=args.exact_weekdays)

    zone_id = resolver.name_to_zone(args.zone)
    if zone_id is None:
        print(f"Unknown zone '{args.zone}'")
        sys.exit(1)

    offset = resolver.zone_offset_at(zone_id, instant)
    print(
        f'{resolver.zone_name(zone_id)} {instant.isoformat()} '
        f'{format_offset(offset)} ({offset})'
    )


if __name__ == '__main__':
    main()
