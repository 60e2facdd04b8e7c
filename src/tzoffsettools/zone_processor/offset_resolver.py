# Copyright 2022 Brian T. Park
#
# MIT License

"""
Answer the question "what was the standard UTC offset of zone Z at the civil
time T". DST Rules are ignored, so the result is the STDOFF field of the
matching Zone line.
"""

import datetime
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from tzoffsettools.data_types.tz_types import OffsetRecord
from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase
from tzoffsettools.data_types.tz_types import ZoneInvariantError


def find_record_index(
    history: Sequence[OffsetRecord],
    instant: datetime.datetime,
    exact_weekdays: bool = False,
) -> int:
    """Return the index of the first record whose UNTIL is absent or later
    than 'instant'. The records are already in chronological order, so a
    linear scan over the few dozen records of a zone is sufficient.
    """
    for index, record in enumerate(history):
        until = record.until
        if until is None or until.to_datetime(exact_weekdays) > instant:
            return index
    raise ZoneInvariantError(
        f'No offset record matches {instant.isoformat()}; '
        'the last record of a history must be open-ended')


def resolve_offset(
    history: Sequence[OffsetRecord],
    instant: datetime.datetime,
    exact_weekdays: bool = False,
) -> int:
    """Return the UTC offset in seconds which applied at 'instant'."""
    return history[find_record_index(history, instant, exact_weekdays)] \
        .offset_seconds


class OffsetResolver:
    """Runtime lookups over a ZoneOffsetDatabase. Zones are identified by
    their zone id, the index of the zone in discovery order. Links resolve to
    the zone id of their target.
    """

    def __init__(
        self,
        zidb: ZoneOffsetDatabase,
        exact_weekdays: bool = False,
    ) -> None:
        self.exact_weekdays = exact_weekdays
        self.names: List[str] = zidb['time_zone_names']
        self.histories: List[List[OffsetRecord]] = [
            zidb['time_zones'][name] for name in self.names
        ]
        self.lookup: Dict[str, str] = zidb['lookup']

        # identifier -> zone id, for both zones and links
        self.identifier_ids: Dict[str, int] = {}
        for name, identifier in zidb['zone_identifiers'].items():
            self.identifier_ids[identifier] = zidb['zone_ids'][name]
        for name, identifier in zidb['link_identifiers'].items():
            self.identifier_ids[identifier] = zidb['link_ids'][name]

    def name_to_zone(self, name: str) -> Optional[int]:
        """Return the zone id of the zone or link 'name', ignoring case. Return
        None if the name is unknown.
        """
        identifier = self.lookup.get(name.casefold())
        if identifier is None:
            return None
        return self.identifier_ids[identifier]

    def zone_name(self, zone_id: int) -> str:
        self._check_zone_id(zone_id)
        return self.names[zone_id]

    def zone_offset_at(self, zone_id: int, instant: datetime.datetime) -> int:
        """Return the standard UTC offset in seconds of the zone at the civil
        time 'instant'.
        """
        self._check_zone_id(zone_id)
        return resolve_offset(
            self.histories[zone_id], instant, self.exact_weekdays)

    def _check_zone_id(self, zone_id: int) -> None:
        # Negative ids would silently index from the end of the list.
        if not 0 <= zone_id < len(self.names):
            raise ValueError(f'Invalid zone id {zone_id}')
