# Copyright 2019 Brian T. Park
#
# MIT License
"""
Generate the 'zone_offsets.py' module which defines the zone enum, the offset
history of every zone, and the case-insensitive name lookup table.
"""

import logging
import os
from typing import List
from typing import Optional

from tzoffsettools.data_types.tz_types import CommentsMap
from tzoffsettools.data_types.tz_types import Cutoff
from tzoffsettools.data_types.tz_types import FixedDay
from tzoffsettools.data_types.tz_types import LastWeekday
from tzoffsettools.data_types.tz_types import OffsetRecord
from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase
from tzoffsettools.transformer.transformer import normalize_raw


class PythonGenerator:
    """Generate the zone_offsets.py file for Python consumers.
    """
    ZONE_OFFSETS_FILE_NAME = 'zone_offsets.py'

    def __init__(
        self,
        invocation: str,
        zidb: ZoneOffsetDatabase,
    ):
        owner = zidb['owner']
        if not owner.isidentifier():
            raise ValueError(f"owner '{owner}' is not a valid class name")

        self.invocation = invocation
        self.tz_files = '\n#   '.join(zidb['tz_files'])
        self.owner = owner
        self.tz_version = zidb['tz_version']
        self.min_year = zidb['min_year']
        self.max_year = zidb['max_year']
        self.names = zidb['time_zone_names']
        self.time_zones = zidb['time_zones']
        self.links_map = zidb['links_map']
        self.removed_links = zidb['removed_links']
        self.zone_ids = zidb['zone_ids']
        self.zone_identifiers = zidb['zone_identifiers']
        self.link_identifiers = zidb['link_identifiers']
        self.lookup = zidb['lookup']

    def generate_files(self, output_dir: str) -> None:
        full_filename = os.path.join(output_dir, self.ZONE_OFFSETS_FILE_NAME)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            print(self.generate_zone_offsets(), end='', file=output_file)
        logging.info("Created %s", full_filename)

    def _generate_header(self) -> str:
        num_zones = len(self.names)
        num_links = len(self.links_map)
        num_removed_links = len(self.removed_links)
        removed_link_items = render_comments_map(self.removed_links)

        return f"""\
# This file was generated by the following script:
#
#   $ {self.invocation}
#
# using the TZ Database files
#
#   {self.tz_files}
#
# from https://github.com/eggert/tz/releases/tag/{self.tz_version}
#
# Zones: {num_zones}
# Links: {num_links}
# Years: [{self.min_year},{self.max_year}]
#
# Removed links: {num_removed_links}
{removed_link_items}#
# DO NOT EDIT

"""

    def generate_zone_offsets(self) -> str:
        return self._generate_header() + f"""\
import enum


class {self.owner}(enum.IntEnum):
{self._generate_enum_items()}

# Each record is (offset_seconds, until). 'until' is None for the last record,
# otherwise (year, month, day_kind, day, weekday, hour, minute, second,
# suffix) where day_kind is 'fixed', 'last_weekday' or 'weekday_on_or_after'.
TIME_ZONE_OFFSETS = {{
{self._generate_offset_items()}}}

TIME_ZONE_NAMES = {{
{self._generate_name_items()}}}

TIME_ZONE_LOOKUP = {{
{self._generate_lookup_items()}}}
"""

    def _generate_enum_items(self) -> str:
        items: List[str] = []
        for name in self.names:
            identifier = _check_identifier(self.zone_identifiers[name])
            items.append(f'    {identifier} = {self.zone_ids[name]}\n')
        if self.links_map:
            items.append('\n    # Links\n')
        for link_name, zone_name in self.links_map.items():
            identifier = _check_identifier(self.link_identifiers[link_name])
            items.append(
                f'    {identifier} = {self.zone_ids[zone_name]}'
                f'  # {link_name} -> {zone_name}\n')
        if not items:
            items.append('    pass\n')
        return ''.join(items)

    def _generate_offset_items(self) -> str:
        items = ''
        for name in self.names:
            identifier = self.zone_identifiers[name]
            items += f"""\
    # {name}
    {self.owner}.{identifier}: (
{_render_records(self.time_zones[name])}    ),
"""
        return items

    def _generate_name_items(self) -> str:
        return ''.join(
            f'    {self.owner}.{self.zone_identifiers[name]}: {name!r},\n'
            for name in self.names
        )

    def _generate_lookup_items(self) -> str:
        return ''.join(
            f'    {key!r}: {self.owner}.{identifier},\n'
            for key, identifier in self.lookup.items()
        )


def _render_records(history: List[OffsetRecord]) -> str:
    items = ''
    for record in history:
        raw_line = normalize_raw(record.raw_line).strip()
        until = _render_cutoff(record.until)
        items += f"""\
        # {raw_line}
        ({record.offset_seconds}, {until}),
"""
    return items


def _render_cutoff(until: Optional[Cutoff]) -> str:
    if until is None:
        return 'None'
    selector = until.day
    if isinstance(selector, FixedDay):
        kind, day, weekday = 'fixed', selector.day, 0
    elif isinstance(selector, LastWeekday):
        kind, day, weekday = 'last_weekday', 0, selector.weekday
    else:
        kind, day, weekday = \
            'weekday_on_or_after', selector.day, selector.weekday
    time = until.time
    return (
        f"({until.year}, {until.month}, '{kind}', {day}, {weekday}, "
        f"{time.hour}, {time.minute}, {time.second}, {time.suffix!r})"
    )


def _check_identifier(identifier: str) -> str:
    if not identifier.isidentifier():
        raise ValueError(f"'{identifier}' is not a valid Python identifier")
    return identifier


def render_comments_map(comments: CommentsMap) -> str:
    """Render {name -> reasons[]} as '#   name (reason; reason)' lines."""
    comment = ''
    for name, reasons in sorted(comments.items()):
        comment += f"#   {name} ({'; '.join(sorted(reasons))})\n"
    return comment
