# Copyright 2018 Brian T. Park
#
# MIT License

"""
Parses the Zone and Link entries of the TZ Database files into the internal
TimeZoneData structure. For reference, the man page of 'zic' documents the
file format. Only the fields needed to compute the history of standard UTC
offsets are interpreted; Rule entries are skipped.

    # Zone  NAME            STDOFF  RULES   FORMAT  [UNTIL]
    Zone    America/Chicago -5:50:36 -      LMT     1883 Nov 18 12:09:24
                            -6:00   US      C%sT    1920
                            -6:00   US      C%sT

    # Link  TARGET          LINK-NAME
    Link    America/Chicago US/Central

Parsing is a fold over the lines of each input file. The ParseState carries
the name of the Zone whose continuation lines are currently being read.
"""

import calendar
import datetime
import logging
import os
import re
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple

from tzoffsettools.data_types.tz_types import Cutoff
from tzoffsettools.data_types.tz_types import DaySelector
from tzoffsettools.data_types.tz_types import FixedDay
from tzoffsettools.data_types.tz_types import LastWeekday
from tzoffsettools.data_types.tz_types import WeekdayOnOrAfter
from tzoffsettools.data_types.tz_types import TimeOfDay
from tzoffsettools.data_types.tz_types import OffsetRecord
from tzoffsettools.data_types.tz_types import AliasEntry
from tzoffsettools.data_types.tz_types import TimeZoneData
from tzoffsettools.data_types.tz_types import MalformedRecordError
from tzoffsettools.data_types.tz_types import MONTH_NAMES
from tzoffsettools.data_types.tz_types import WEEKDAY_NAMES
from tzoffsettools.data_types.tz_types import TIME_SUFFIXES
from tzoffsettools.extractor.lines import ZoneLine
from tzoffsettools.extractor.lines import ContinuationLine
from tzoffsettools.extractor.lines import LinkLine
from tzoffsettools.extractor.lines import OtherLine
from tzoffsettools.extractor.lines import LineKind
from tzoffsettools.extractor.lines import classify_line

UNSIGNED_PATTERN = re.compile(r'[0-9]+')
SIGNED_PATTERN = re.compile(r'[-+]?[0-9]+')


class ParseState(NamedTuple):
    """Accumulator threaded through the lines of a single input source.
    'active' is the name of the Zone which owns the next continuation line,
    or None if a continuation line is not allowed.
    """
    data: TimeZoneData
    active: Optional[str] = None


class Extractor:
    """Read the TZ Database files and extract the Zone and Link entries.

    Usage:
        extractor = Extractor(input_dir)
        extractor.parse()
        extractor.print_summary()
        data = extractor.get_data()
    """

    # Files that contain the Zone and Link entries of the main distribution.
    ZONE_FILES: List[str] = [
        'africa',
        'antarctica',
        'asia',
        'australasia',
        'backward',
        'etcetera',
        'europe',
        'northamerica',
        'southamerica',
    ]

    def __init__(self, input_dir: str = '') -> None:
        self.input_dir = input_dir
        self.data = TimeZoneData()
        self.sources: List[str] = []
        self.zone_lines = 0
        self.continuation_lines = 0
        self.link_lines = 0
        self.other_lines = 0

    def parse(self) -> None:
        """Read the ZONE_FILES located in 'input_dir'."""
        self.parse_files([
            os.path.join(self.input_dir, name) for name in self.ZONE_FILES
        ])

    def parse_files(self, paths: Iterable[str]) -> None:
        """Read the given files in order. OSError propagates to the caller."""
        for path in paths:
            logging.info('Reading %s', path)
            with open(path, 'r', encoding='utf-8') as f:
                self.parse_lines(f, source=path)

    def parse_lines(
        self,
        lines: Iterable[str],
        source: str = '<lines>',
    ) -> None:
        """Fold the lines of one source into the TimeZoneData. Each source
        starts with no active Zone.
        """
        self.sources.append(source)
        state = ParseState(self.data)
        for line_number, line in enumerate(lines, start=1):
            try:
                state = self._process_line(state, line)
            except MalformedRecordError as e:
                if e.source is not None:
                    raise
                raise MalformedRecordError(e.message, source, line_number) \
                    from e

    def _process_line(self, state: ParseState, line: str) -> ParseState:
        """Same as process_line(), but also counts the kinds of lines."""
        kind = classify_line(line)
        if isinstance(kind, ZoneLine):
            self.zone_lines += 1
        elif isinstance(kind, ContinuationLine):
            self.continuation_lines += 1
        elif isinstance(kind, LinkLine):
            self.link_lines += 1
        elif isinstance(kind, OtherLine):
            self.other_lines += 1
        return apply_line(state, kind, line)

    def get_data(self) -> TimeZoneData:
        return self.data

    def print_summary(self) -> None:
        logging.info(
            'Summary: Lines: zone=%d; continuation=%d; link=%d; other=%d',
            self.zone_lines, self.continuation_lines, self.link_lines,
            self.other_lines,
        )
        logging.info(
            'Summary: Zones: %d; Offset records: %d; Links: %d',
            len(self.data.time_zone_names),
            sum(len(h) for h in self.data.time_zones.values()),
            len(self.data.time_zone_aliases),
        )


def process_line(state: ParseState, line: str) -> ParseState:
    """Process a single line and return the new ParseState. Blank and comment
    lines leave the state unchanged.
    """
    return apply_line(state, classify_line(line), line)


def apply_line(
    state: ParseState,
    kind: Optional[LineKind],
    line: str,
) -> ParseState:
    """Apply an already classified line to the ParseState."""
    if kind is None:
        return state

    raw_line = line.rstrip('\r\n')
    data = state.data
    if isinstance(kind, ZoneLine):
        name = parse_zone(kind.fields, data, raw_line)
        return ParseState(data, name)
    if isinstance(kind, ContinuationLine):
        parse_zone_continuation(kind.fields, state.active, data, raw_line)
        return state
    if isinstance(kind, LinkLine):
        parse_link(kind.fields, data)
        return ParseState(data, None)
    return ParseState(data, None)


# -----------------------------------------------------------------------------
# Offset record parsers.
# -----------------------------------------------------------------------------

def parse_zone(
    fields: List[str],
    data: TimeZoneData,
    raw_line: str = '',
) -> str:
    """Parse 'Zone NAME STDOFF RULES FORMAT [UNTIL]', append the offset record
    to the history of NAME, and return NAME as the active Zone.
    """
    if len(fields) < 5 or fields[0] != 'Zone':
        raise MalformedRecordError(f"Invalid Zone line: '{raw_line}'")
    name = fields[1]
    record = _parse_offset_record(fields[2:], raw_line)

    if name not in data.time_zones:
        data.time_zones[name] = []
        data.time_zone_names.append(name)
    _append_record(data, name, record)
    return name


def parse_zone_continuation(
    fields: List[str],
    active: Optional[str],
    data: TimeZoneData,
    raw_line: str = '',
) -> None:
    """Parse 'STDOFF RULES FORMAT [UNTIL]' and append it to the active Zone.
    """
    if active is None:
        raise MalformedRecordError(
            f"Continuation line without a preceding Zone: '{raw_line}'")
    if len(fields) < 3:
        raise MalformedRecordError(
            f"Invalid Zone continuation line: '{raw_line}'")
    _append_record(data, active, _parse_offset_record(fields, raw_line))


def parse_link(fields: List[str], data: TimeZoneData) -> None:
    """Parse 'Link TARGET LINK-NAME'."""
    if len(fields) != 3 or fields[0] != 'Link':
        raise MalformedRecordError(f'Invalid Link line: {fields}')
    data.time_zone_aliases.append(AliasEntry(target=fields[1], alias=fields[2]))


def _parse_offset_record(fields: List[str], raw_line: str) -> OffsetRecord:
    """Parse 'STDOFF RULES FORMAT [UNTIL]'."""
    return OffsetRecord(
        offset_seconds=parse_time_offset(fields[0]),
        until=parse_until(fields[3:]),
        rules=fields[1],
        format=fields[2],
        raw_line=raw_line,
    )


def _append_record(data: TimeZoneData, name: str, record: OffsetRecord) -> None:
    """Append the record, making sure that only the last record of a history
    is open-ended.
    """
    history = data.time_zones[name]
    if history and history[-1].until is None:
        raise MalformedRecordError(
            f"Zone '{name}' has a record after an open-ended record")
    history.append(record)


def parse_time_offset(offset: str) -> int:
    """Convert '[-]h[:mm[:ss]]' into seconds. The sign of the hour applies to
    the minutes and seconds as well, including '-0:30' which is -1800.
    """
    elems = offset.split(':')
    if len(elems) > 3 or not SIGNED_PATTERN.fullmatch(elems[0]):
        raise MalformedRecordError(f"Invalid time offset '{offset}'")

    hours = int(elems[0])
    minutes = _parse_unsigned(elems[1], 'minute') if len(elems) > 1 else 0
    seconds = _parse_unsigned(elems[2], 'second') if len(elems) > 2 else 0

    sign = -1 if hours < 0 or elems[0] == '-0' else 1
    return hours * 3600 + sign * (minutes * 60 + seconds)


# -----------------------------------------------------------------------------
# UNTIL parser.
# -----------------------------------------------------------------------------

def parse_until(fields: List[str]) -> Optional[Cutoff]:
    """Parse the optional 'YEAR [MONTH [DAY [TIME]]]' fields. Returns None if
    the fields are absent, which means that the record never expires.
    """
    for i, f in enumerate(fields):
        if f.startswith('#'):
            fields = fields[:i]
            break
    if not fields:
        return None
    if len(fields) > 4:
        raise MalformedRecordError(f'Too many UNTIL fields: {fields}')

    year = _parse_unsigned(fields[0], 'year')
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise MalformedRecordError(f"UNTIL year '{fields[0]}' out of range")
    month = month_to_index(fields[1]) if len(fields) > 1 else 1
    day = parse_day_selector(fields[2]) if len(fields) > 2 else FixedDay(1)
    _check_day_of_month(year, month, day)
    time = parse_time_of_day(fields[3]) if len(fields) > 3 else TimeOfDay()
    return Cutoff(year=year, month=month, day=day, time=time)


def _check_day_of_month(year: int, month: int, day: DaySelector) -> None:
    """The day of 'Feb 30' or 'Sun>=0' must exist in the given month."""
    if isinstance(day, LastWeekday):
        return
    days_in_month = calendar.monthrange(year, month)[1]
    if not 1 <= day.day <= days_in_month:
        raise MalformedRecordError(
            f'UNTIL day {day.day} out of range for {year}-{month:02}')


def parse_day_selector(day_string: str) -> DaySelector:
    """Parse 'lastSun', 'Sun>=8', or a day of month like '15'."""
    if day_string.startswith('last'):
        return LastWeekday(weekday_to_index(day_string[4:]))

    index = day_string.find('>=')
    if index >= 0:
        return WeekdayOnOrAfter(
            weekday=weekday_to_index(day_string[:index]),
            day=_parse_unsigned(day_string[index + 2:], 'day'),
        )

    return FixedDay(_parse_unsigned(day_string, 'day'))


def parse_time_of_day(time_string: str) -> TimeOfDay:
    """Parse 'h', 'h:mm', or 'h:mm:ss' with an optional suffix letter."""
    time, suffix = parse_at_time_string(time_string)
    elems = time.split(':')
    if len(elems) > 3 or not SIGNED_PATTERN.fullmatch(elems[0]):
        raise MalformedRecordError(f"Invalid UNTIL time '{time_string}'")

    hour = int(elems[0])
    minute = _parse_unsigned(elems[1], 'minute') if len(elems) > 1 else 0
    second = _parse_unsigned(elems[2], 'second') if len(elems) > 2 else 0
    if minute > 59 or second > 59:
        raise MalformedRecordError(f"Invalid UNTIL time '{time_string}'")
    return TimeOfDay(hour=hour, minute=minute, second=second, suffix=suffix)


def parse_at_time_string(at_string: str) -> Tuple[str, str]:
    """Parses the '2:00s' string into '2:00' and 's'. If there is no suffix,
    returns an empty string for the suffix. Raises an exception for an
    unknown suffix.
    """
    if not at_string:
        raise MalformedRecordError('Empty time string')
    suffix = at_string[-1]
    if suffix.isdigit():
        return (at_string, '')
    if suffix not in TIME_SUFFIXES:
        raise MalformedRecordError(
            f"Invalid time suffix '{suffix}' in '{at_string}'")
    return (at_string[:-1], suffix)


def month_to_index(month: str) -> int:
    """Convert 'Jan', 'jan', or 'January' into 1. At least 3 letters are
    required to identify a month.
    """
    return _name_to_index(month, MONTH_NAMES, 'month') + 1


def weekday_to_index(weekday: str) -> int:
    """Convert 'Sun', 'sun', or 'Sunday' into 0, ..., 'Sat' into 6."""
    return _name_to_index(weekday, WEEKDAY_NAMES, 'weekday')


def _name_to_index(name: str, names: List[str], label: str) -> int:
    if len(name) >= 3:
        folded = name.lower()
        for index, full_name in enumerate(names):
            if full_name.lower().startswith(folded):
                return index
    raise MalformedRecordError(f"Invalid {label} '{name}'")


def _parse_unsigned(value: str, label: str) -> int:
    if not UNSIGNED_PATTERN.fullmatch(value):
        raise MalformedRecordError(f"Invalid {label} '{value}'")
    return int(value)
