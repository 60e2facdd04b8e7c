# Copyright 2022 Brian T. Park
#
# MIT License

import calendar
import datetime
from dataclasses import dataclass
from dataclasses import field
from typing import Collection
from typing import Dict
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Set
from typing import Union
from typing import cast
from typing_extensions import TypedDict

"""
Data types created or consumed by the extractor, transformer, zone_processor
and generator packages. These allow type checking to be performed using mypy.
Also contains the exceptions and global constants shared by those packages.
"""

# -----------------------------------------------------------------------------
# Constants used by various modules.
# -----------------------------------------------------------------------------

# Month names in TZDB order. Index + 1 is the month number.
MONTH_NAMES: List[str] = [
    'January', 'February', 'March', 'April', 'May', 'June', 'July',
    'August', 'September', 'October', 'November', 'December',
]

# Weekday names in TZDB order. The index is the weekday number, Sun=0.
WEEKDAY_NAMES: List[str] = [
    'Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday',
    'Saturday',
]

# Valid suffixes of the UNTIL time field: wall, standard, UTC (g, u, z).
TIME_SUFFIXES: str = 'wsguz'

# Prefixes of the fixed-offset zones whose sign is rewritten into a word.
GMT_PREFIXES: List[str] = ['Etc/GMT', 'GMT']

# Default owner tag used as the enum name of the generated identifiers.
DEFAULT_OWNER: str = 'TimeZone'


# -----------------------------------------------------------------------------
# Exceptions.
# -----------------------------------------------------------------------------

class TzDataError(Exception):
    """Base exception for all errors raised while processing the TZDB."""


class MalformedRecordError(TzDataError):
    """A record of the TZ database could not be parsed or violates a
    structural rule of the database. The whole run is aborted.

    The 'source' and 'line_number' attributes are filled in by the Extractor
    when the error can be traced back to a line of an input source.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        if source is not None:
            message = f'{source}:{line_number}: {message}'
        super().__init__(message)
        self.message = message
        self.source = source
        self.line_number = line_number


class IdentifierCollisionError(MalformedRecordError):
    """Two different zone or link names normalize to the same identifier."""


class ZoneInvariantError(TzDataError):
    """A zone history was constructed in violation of its invariants. This is
    a programming error, not bad input.
    """


# -----------------------------------------------------------------------------
# Data types produced by extractor.py.
# -----------------------------------------------------------------------------

class FixedDay(NamedTuple):
    """UNTIL day given as a plain day of month, e.g. '15'."""
    day: int


class LastWeekday(NamedTuple):
    """UNTIL day given as 'lastSun'."""
    weekday: int  # Sun=0, Sat=6


class WeekdayOnOrAfter(NamedTuple):
    """UNTIL day given as 'Sun>=8'."""
    weekday: int  # Sun=0, Sat=6
    day: int


DaySelector = Union[FixedDay, LastWeekday, WeekdayOnOrAfter]


class TimeOfDay(NamedTuple):
    """The optional time of the UNTIL field, e.g. '2:00s'.

    The time scale suffix is retained but not honored: every reading is
    treated as the wall clock. 'scale_ignored' flags the records whose suffix
    names a different scale.
    """
    hour: int = 0
    minute: int = 0
    second: int = 0
    suffix: str = ''  # '', 'w', 's', 'u', 'g', 'z'

    @property
    def scale_ignored(self) -> bool:
        return self.suffix not in ('', 'w')

    def to_seconds(self) -> int:
        return (self.hour * 60 + self.minute) * 60 + self.second


class Cutoff(NamedTuple):
    """The normalized UNTIL field of a Zone line. Represents the civil time at
    which an offset record stops applying. For example:

    # Zone  NAME            STDOFF  RULES   FORMAT  [UNTIL]
    Zone    Asia/Tbilisi    3:00    E-EurAsia +03/+04 1996 Oct lastSun
    """
    year: int
    month: int = 1
    day: DaySelector = FixedDay(1)
    time: TimeOfDay = TimeOfDay()

    def day_of_month(self, exact_weekdays: bool = False) -> datetime.date:
        """Return the calendar date selected by this cutoff.

        Without 'exact_weekdays', the weekday part of the selector is ignored:
        'lastSun' resolves to day 1 and 'Sun>=8' to day 8. Otherwise the
        actual matching weekday is computed, which may shift 'Sun>=29' into
        the following month.
        """
        selector = self.day
        if isinstance(selector, FixedDay):
            return datetime.date(self.year, self.month, selector.day)
        if not exact_weekdays:
            if isinstance(selector, WeekdayOnOrAfter):
                return datetime.date(self.year, self.month, selector.day)
            return datetime.date(self.year, self.month, 1)

        if isinstance(selector, LastWeekday):
            days_in_month = calendar.monthrange(self.year, self.month)[1]
            last = datetime.date(self.year, self.month, days_in_month)
            shift = (_sunday_weekday(last) - selector.weekday + 7) % 7
            return last - datetime.timedelta(days=shift)

        limit = datetime.date(self.year, self.month, selector.day)
        shift = (selector.weekday - _sunday_weekday(limit) + 7) % 7
        return limit + datetime.timedelta(days=shift)

    def to_datetime(self, exact_weekdays: bool = False) -> datetime.datetime:
        """Convert to a comparable civil datetime. Times of 24:00 or later
        roll over into the following day(s).
        """
        date = self.day_of_month(exact_weekdays)
        return (
            datetime.datetime(date.year, date.month, date.day)
            + datetime.timedelta(seconds=self.time.to_seconds())
        )


def _sunday_weekday(date: datetime.date) -> int:
    """Return the weekday of 'date' using Sun=0, ..., Sat=6."""
    return date.isoweekday() % 7


class OffsetRecord(NamedTuple):
    """One line of a Zone entry, corresponding to a ZONE line or a
    continuation line in a tz database file:

    # Zone  NAME                STDOFF      RULES   FORMAT  [UNTIL]
    Zone    America/Chicago     -5:50:36    -       LMT     1883 Nov 18 12:09:24
                                -6:00       US      C%sT    1920
                                ...
                                -6:00       US      C%sT
    """
    offset_seconds: int  # STDOFF in seconds
    until: Optional[Cutoff]  # None means 'applies forever'
    rules: str = '-'  # name of the Rule, '-', or a fixed 'hh:mm' DST offset
    format: str = ''  # abbreviation format (e.g. P%sT, E%sT, GMT/BST)
    raw_line: str = ''  # original line in the TZ file


class AliasEntry(NamedTuple):
    """A 'Link TARGET LINK-NAME' line."""
    target: str
    alias: str


# Map of zoneName -> OffsetRecord[], in file order. Created by extractor.py.
ZoneHistory = Dict[str, List[OffsetRecord]]


@dataclass
class TimeZoneData:
    """Result type of Extractor.get_data(). The 'time_zone_names' and
    'time_zone_aliases' lists form the canonical name table.
    """
    time_zones: ZoneHistory = field(default_factory=dict)
    time_zone_names: List[str] = field(default_factory=list)  # first-seen
    time_zone_aliases: List[AliasEntry] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Data types generated by transformer.py
# -----------------------------------------------------------------------------

# Map of linkName -> zoneName. Derived from the alias list by transformer.py.
LinksMap = Dict[str, str]

# Map of {name -> Set[reason]} used by Transformer to collect de-duped error
# messages or warnings. A set() collection does not serialize well to JSON, so
# create_zone_offset_database() converts these into {name -> List[str]}.
CommentsMap = Dict[str, Collection[str]]


@dataclass
class TransformerResult:
    """Result type of Transformer.transform()."""

    time_zones: ZoneHistory  # {zoneName -> OffsetRecord[]}
    time_zone_names: List[str]  # zone names in first-seen order
    links_map: LinksMap  # {linkName -> zoneName}
    removed_links: CommentsMap  # {linkName -> reasons[]}
    notable_zones: CommentsMap  # {zoneName -> reasons[]}
    zone_ids: Dict[str, int]  # {zoneName -> index in time_zone_names}
    link_ids: Dict[str, int]  # {linkName -> index of target zone}
    zone_identifiers: Dict[str, str]  # {zoneName -> identifier}
    link_identifiers: Dict[str, str]  # {linkName -> identifier}
    lookup: Dict[str, str]  # {casefold(name) -> identifier}
    min_year: int  # smallest UNTIL year
    max_year: int  # largest UNTIL year


def add_comment(comments: CommentsMap, name: str, reason: str) -> None:
    """Add the human readable 'reason' to the 'comments' CommentsMap.
    """
    reasons = cast(Optional[Set[str]], comments.get(name))
    if not reasons:
        reasons = set()
        comments[name] = reasons
    reasons.add(reason)


def merge_comments(target: CommentsMap, new: CommentsMap) -> None:
    """Merge 'new' CommentsMap into 'target' CommentsMap.
    """
    for name, new_reasons in new.items():
        old_reasons = cast(Optional[Set[str]], target.get(name))
        if not old_reasons:
            old_reasons = set()
            target[name] = old_reasons
        old_reasons.update(new_reasons)


# -----------------------------------------------------------------------------
# The zone offset database which can be rendered into different forms by
# various generators (e.g. JSON, Python, binary blob).
# -----------------------------------------------------------------------------

class ZoneOffsetDatabase(TypedDict):
    """The complete internal representation of the TZ Database files after
    extraction and identifier normalization.
    """

    # Context data.
    tz_version: str
    tz_files: List[str]
    owner: str
    num_zones: int
    num_links: int
    min_year: int
    max_year: int

    # Data from Extractor filtered through Transformer.
    time_zones: ZoneHistory
    time_zone_names: List[str]
    links_map: LinksMap

    # Data from Transformer.
    removed_links: CommentsMap
    notable_zones: CommentsMap
    zone_ids: Dict[str, int]
    link_ids: Dict[str, int]
    zone_identifiers: Dict[str, str]
    link_identifiers: Dict[str, str]
    lookup: Dict[str, str]


def create_zone_offset_database(
    tz_version: str,
    tz_files: List[str],
    owner: str,
    tresult: TransformerResult,
) -> ZoneOffsetDatabase:
    """Return an instance of ZoneOffsetDatabase from the various ingredients."""

    return {
        # Context data.
        'tz_version': tz_version,
        'tz_files': tz_files,
        'owner': owner,
        'num_zones': len(tresult.time_zone_names),
        'num_links': len(tresult.links_map),
        'min_year': tresult.min_year,
        'max_year': tresult.max_year,

        # Data from Extractor filtered through Transformer.
        'time_zones': tresult.time_zones,
        'time_zone_names': tresult.time_zone_names,
        'links_map': tresult.links_map,

        # Data from Transformer.
        'removed_links': _sort_comments(tresult.removed_links),
        'notable_zones': _sort_comments(tresult.notable_zones),
        'zone_ids': tresult.zone_ids,
        'link_ids': tresult.link_ids,
        'zone_identifiers': tresult.zone_identifiers,
        'link_identifiers': tresult.link_identifiers,
        'lookup': tresult.lookup,
    }


def _sort_comments(comments: CommentsMap) -> CommentsMap:
    """Sort and convert {name -> Set(str)} to {name -> List(str)} to provide
    deterministic ordering.
    """
    return {k: list(sorted(v)) for k, v in sorted(comments.items())}


def cutoff_to_dict(cutoff: Optional[Cutoff]) -> Optional[Dict[str, object]]:
    """Convert a Cutoff into a JSON friendly dict. The day selector is tagged
    with its 'kind'.
    """
    if cutoff is None:
        return None
    selector = cutoff.day
    day: Dict[str, object]
    if isinstance(selector, LastWeekday):
        day = {'kind': 'last_weekday', 'weekday': selector.weekday}
    elif isinstance(selector, WeekdayOnOrAfter):
        day = {
            'kind': 'weekday_on_or_after',
            'weekday': selector.weekday,
            'day': selector.day,
        }
    else:
        day = {'kind': 'fixed', 'day': selector.day}
    return {
        'year': cutoff.year,
        'month': cutoff.month,
        'day': day,
        'time': cutoff.time._asdict(),
    }
