# Copyright 2023 Brian T. Park
#
# MIT License
"""
Generate the 'zone_offsets.bin' file, a compact little endian table of the
offset histories, for consumers which load the data at runtime instead of
compiling generated source code.

Layout:

    header:
        'TZOF' magic, u8 version
        u16 num_zones, u16 num_links
    zones (in zone id order):
        string name
        u16 num_records
        records:
            i32 offset_seconds
            u8 has_until
            if has_until:
                i16 year, u8 month
                u8 day_kind (0=fixed, 1=lastXxx, 2=Xxx>=N)
                u8 day (0 for lastXxx), u8 weekday (0 for fixed)
                u8 hour, u8 minute, u8 second
                u8 suffix (ASCII letter, 0 if absent)
    links:
        string name
        u16 zone id of the target

where 'string' is a u16 length followed by UTF-8 bytes.
"""

import logging
import os
from typing import Optional

from tzoffsettools.data_types.tz_types import Cutoff
from tzoffsettools.data_types.tz_types import FixedDay
from tzoffsettools.data_types.tz_types import LastWeekday
from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase
from tzoffsettools.generator.byteutils import hex_encode
from tzoffsettools.generator.byteutils import write_i16
from tzoffsettools.generator.byteutils import write_i32
from tzoffsettools.generator.byteutils import write_string
from tzoffsettools.generator.byteutils import write_u8
from tzoffsettools.generator.byteutils import write_u16

BLOB_MAGIC = b'TZOF'
BLOB_VERSION = 1

DAY_KIND_FIXED = 0
DAY_KIND_LAST_WEEKDAY = 1
DAY_KIND_WEEKDAY_ON_OR_AFTER = 2


class BlobGenerator:
    """Serialize the ZoneOffsetDatabase into a binary table."""
    BLOB_FILE_NAME = 'zone_offsets.bin'

    def __init__(self, zidb: ZoneOffsetDatabase):
        self.zidb = zidb

    def generate_files(self, output_dir: str) -> None:
        full_filename = os.path.join(output_dir, self.BLOB_FILE_NAME)
        with open(full_filename, 'wb') as output_file:
            output_file.write(self.generate_blob())
        logging.info("Created %s", full_filename)

    def generate_blob(self) -> bytearray:
        names = self.zidb['time_zone_names']
        time_zones = self.zidb['time_zones']
        links_map = self.zidb['links_map']
        zone_ids = self.zidb['zone_ids']

        data = bytearray(BLOB_MAGIC)
        write_u8(data, BLOB_VERSION)
        write_u16(data, len(names))
        write_u16(data, len(links_map))
        logging.debug('Blob header: %s', hex_encode(data))

        for name in names:
            history = time_zones[name]
            write_string(data, name)
            write_u16(data, len(history))
            for record in history:
                write_i32(data, record.offset_seconds)
                _write_cutoff(data, record.until)

        for link_name, zone_name in links_map.items():
            write_string(data, link_name)
            write_u16(data, zone_ids[zone_name])

        return data


def _write_cutoff(data: bytearray, until: Optional[Cutoff]) -> None:
    if until is None:
        write_u8(data, 0)
        return

    write_u8(data, 1)
    write_i16(data, until.year)
    write_u8(data, until.month)

    selector = until.day
    if isinstance(selector, FixedDay):
        write_u8(data, DAY_KIND_FIXED)
        write_u8(data, selector.day)
        write_u8(data, 0)
    elif isinstance(selector, LastWeekday):
        write_u8(data, DAY_KIND_LAST_WEEKDAY)
        write_u8(data, 0)
        write_u8(data, selector.weekday)
    else:
        write_u8(data, DAY_KIND_WEEKDAY_ON_OR_AFTER)
        write_u8(data, selector.day)
        write_u8(data, selector.weekday)

    time = until.time
    write_u8(data, time.hour)
    write_u8(data, time.minute)
    write_u8(data, time.second)
    write_u8(data, ord(time.suffix) if time.suffix else 0)
