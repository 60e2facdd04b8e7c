# Copyright 2018 Brian T. Park
#
# MIT License.

import logging
from typing import Dict
from typing import List
from typing import Tuple

from tzoffsettools.data_types.tz_types import TimeZoneData
from tzoffsettools.data_types.tz_types import ZoneHistory
from tzoffsettools.data_types.tz_types import LinksMap
from tzoffsettools.data_types.tz_types import CommentsMap
from tzoffsettools.data_types.tz_types import TransformerResult
from tzoffsettools.data_types.tz_types import MalformedRecordError
from tzoffsettools.data_types.tz_types import IdentifierCollisionError
from tzoffsettools.data_types.tz_types import add_comment
from tzoffsettools.data_types.tz_types import merge_comments
from tzoffsettools.data_types.tz_types import DEFAULT_OWNER
from tzoffsettools.data_types.tz_types import GMT_PREFIXES


class Transformer:
    """
    Validates the TimeZoneData produced by the Extractor, and derives the
    tables needed by the generators and the OffsetResolver: the numeric zone
    ids in discovery order, the normalized identifier of every zone and link,
    and the case-insensitive lookup table from names to identifiers.

    Any inconsistency which would produce an incorrect table is fatal. The
    only records which are dropped are links to zones that are missing from
    the processed files.
    """
    def __init__(self, owner: str = DEFAULT_OWNER):
        """
        Args:
            owner: namespace tag of the identifiers (e.g. the enum name),
                whose first letter prefixes all-digit identifiers
        """
        if not owner:
            raise ValueError('owner must be defined')
        self.owner = owner
        self.all_removed_links: CommentsMap = {}
        self.all_notable_zones: CommentsMap = {}

    def transform(self, data: TimeZoneData) -> TransformerResult:
        time_zones = data.time_zones
        names = data.time_zone_names

        logging.info(
            'Found %d zones, %d links',
            len(names),
            len(data.time_zone_aliases),
        )

        # Part 1: Sanity checks.
        _verify_histories(time_zones)
        links_map = _create_links_map(data)
        _detect_links_to_zones(links_map, time_zones)
        _detect_links_to_links(links_map)
        self._detect_scale_suffixes(time_zones)

        # Part 2: Remove links to zones which were not processed.
        links_map = self._remove_links_to_missing_zones(links_map, time_zones)

        # Part 3: Identifiers and lookup tables.
        zone_ids = {name: index for index, name in enumerate(names)}
        link_ids = {
            link_name: zone_ids[zone_name]
            for link_name, zone_name in links_map.items()
        }
        zone_identifiers = {
            name: format_identifier(self.owner, name) for name in names
        }
        link_identifiers = {
            name: format_identifier(self.owner, name) for name in links_map
        }
        _detect_identifier_collisions(zone_identifiers, link_identifiers)
        lookup = _create_lookup(zone_identifiers, link_identifiers)

        min_year, max_year = _detect_tzdb_years(time_zones)

        return TransformerResult(
            time_zones=time_zones,
            time_zone_names=list(names),
            links_map=links_map,
            removed_links=self.all_removed_links,
            notable_zones=self.all_notable_zones,
            zone_ids=zone_ids,
            link_ids=link_ids,
            zone_identifiers=zone_identifiers,
            link_identifiers=link_identifiers,
            lookup=lookup,
            min_year=min_year,
            max_year=max_year,
        )

    def print_summary(self, tresult: TransformerResult) -> None:
        logging.info(
            f"Summary: Zones: generated={len(tresult.time_zone_names)}"
            f"; noted={len(tresult.notable_zones)}")

        logging.info(
            f"Summary: Links: generated={len(tresult.links_map)}"
            f"; removed={len(tresult.removed_links)}")

        logging.info(
            f"Summary: Years: [{tresult.min_year},{tresult.max_year}]")

    def _print_comments_map(
        self,
        label: str,
        comments: CommentsMap,
        max_comments: int = 5,
    ) -> None:
        """Helper routine that prints the 'Removed' or 'Noted' zones or links
        along with the reason why it was removed or noted. Print up to a
        maximum of max_comments entries.
        """
        if len(comments) == 0:
            return

        logging.info(label, len(comments))

        # Print all lines if len() <= max_comments. Otherwise, print top half of
        # max_comments and bottom half of max_comments.
        sorted_comments = sorted(comments.items())
        num_items = len(sorted_comments)
        if num_items <= max_comments:
            for name, reasons in sorted_comments:
                logging.info(f'- {name} ({reasons})')
            return

        limit = (max_comments - 1) // 2
        for name, reasons in sorted_comments[:limit]:
            logging.info(f'- {name} ({reasons})')
        logging.info('- [...]')
        for name, reasons in sorted_comments[num_items - limit:]:
            logging.info(f'- {name} ({reasons})')

    def _remove_links_to_missing_zones(
        self,
        links_map: LinksMap,
        time_zones: ZoneHistory,
    ) -> LinksMap:
        """Remove links whose target zone was not processed, which happens
        when only a subset of the TZDB files is given (e.g. 'backward' without
        'northamerica').
        """
        results: LinksMap = {}
        removed_links: CommentsMap = {}
        for link_name, zone_name in links_map.items():
            if zone_name in time_zones:
                results[link_name] = zone_name
            else:
                add_comment(
                    removed_links, link_name,
                    f"Target Zone '{zone_name}' missing")

        self._print_comments_map(
            'Removed %s links with missing target zones', removed_links,
        )
        merge_comments(self.all_removed_links, removed_links)
        return results

    def _detect_scale_suffixes(self, time_zones: ZoneHistory) -> None:
        """Note the zones with an UNTIL time suffix ('s', 'u', ...) which is
        parsed but treated as a wall clock reading.
        """
        notable_zones: CommentsMap = {}
        for name, history in time_zones.items():
            for record in history:
                until = record.until
                if until is not None and until.time.scale_ignored:
                    add_comment(
                        notable_zones, name,
                        f"UNTIL time suffix '{until.time.suffix}' ignored")

        self._print_comments_map(
            'Noted %s zones with ignored UNTIL time suffix', notable_zones,
        )
        merge_comments(self.all_notable_zones, notable_zones)


def format_identifier(owner: str, name: str) -> str:
    """Convert a zone or link name into a symbol. For example,
    'America/New_York' -> 'America_New_York', 'Etc/GMT+5' ->
    'Etc_GMT_Ahead_5', 'Etc/GMT-14' -> 'Etc_GMT_Behind_14'. An all-digit name
    is prefixed with the first letter of the 'owner'.
    """
    if not name:
        raise MalformedRecordError('Empty zone name')

    identifier = name
    for prefix in GMT_PREFIXES:
        if identifier.startswith(prefix):
            offset = identifier[len(prefix):]
            if offset.startswith('+'):
                identifier = f'{prefix}_Ahead_{offset[1:]}'
            elif offset.startswith('-'):
                identifier = f'{prefix}_Behind_{offset[1:]}'

    identifier = identifier.replace('-', '_').replace('/', '_')

    if identifier.isdigit():
        return f'{owner[0]}_{identifier}'
    if identifier[0].islower():
        return identifier[0].upper() + identifier[1:]
    return identifier


def _verify_histories(time_zones: ZoneHistory) -> None:
    """Verify that only the last record of each zone is open-ended."""
    for name, history in time_zones.items():
        if not history:
            raise MalformedRecordError(f"Zone '{name}' has no records")
        for record in history[:-1]:
            if record.until is None:
                raise MalformedRecordError(
                    f"Zone '{name}' has an open-ended record before the last"
                    f": '{record.raw_line}'")


def _create_links_map(data: TimeZoneData) -> LinksMap:
    """Convert the alias list into {linkName -> zoneName}. The same link name
    appearing twice is an error.
    """
    links_map: LinksMap = {}
    for entry in data.time_zone_aliases:
        if entry.alias in links_map:
            raise MalformedRecordError(f"Duplicate Link '{entry.alias}'")
        links_map[entry.alias] = entry.target
    return links_map


def _detect_links_to_zones(
    links_map: LinksMap,
    time_zones: ZoneHistory,
) -> None:
    """A link name must never also be the name of a Zone."""
    for link_name in links_map:
        if link_name in time_zones:
            raise MalformedRecordError(
                f"Link '{link_name}' is also defined as a Zone")


def _detect_links_to_links(links_map: LinksMap) -> None:
    """Check for links to links, which are not supported. Resolving them
    would require following the chain and detecting cycles, so throw an
    exception to notify the human operator instead.
    """
    for link_name, target_name in links_map.items():
        if target_name in links_map:
            raise MalformedRecordError(
                f"Unsupported Link to Link: {link_name} -> {target_name}")
    logging.info('Detected no links-to-links')


def _detect_identifier_collisions(
    zone_identifiers: Dict[str, str],
    link_identifiers: Dict[str, str],
) -> None:
    """If there were 2 names like "Etc/GMT-0" and "Etc/GMT_Behind_0", both
    would produce the identifier "Etc_GMT_Behind_0". Make this a fatal error
    instead of silently merging the two.
    """
    identifiers: Dict[str, str] = {}  # identifier -> name
    for name, identifier in (
        list(zone_identifiers.items()) + list(link_identifiers.items())
    ):
        colliding_name = identifiers.get(identifier)
        if colliding_name is not None:
            raise IdentifierCollisionError(
                f"Duplicate identifier '{identifier}' "
                f"for '{name}' and '{colliding_name}'")
        identifiers[identifier] = name
    logging.info('Detected no identifier collisions')


def _create_lookup(
    zone_identifiers: Dict[str, str],
    link_identifiers: Dict[str, str],
) -> Dict[str, str]:
    """Create the case-insensitive {casefold(name) -> identifier} table over
    zones and links. Two names that differ only by case are fatal.
    """
    lookup: Dict[str, str] = {}
    names: Dict[str, str] = {}  # key -> original name
    for name, identifier in (
        list(zone_identifiers.items()) + list(link_identifiers.items())
    ):
        key = name.casefold()
        if key in lookup:
            raise IdentifierCollisionError(
                f"Names '{name}' and '{names[key]}' differ only by case")
        lookup[key] = identifier
        names[key] = name
    return lookup


def _detect_tzdb_years(time_zones: ZoneHistory) -> Tuple[int, int]:
    """Scan the UNTIL fields and determine the min and max years. Returns
    (0, 0) if no record has an UNTIL field.
    """
    years: List[int] = [
        record.until.year
        for history in time_zones.values()
        for record in history
        if record.until is not None
    ]
    if not years:
        return 0, 0
    return min(years), max(years)


def normalize_raw(raw_line: str) -> str:
    """Replace hard tabs with 4 spaces.
    """
    return raw_line.replace('\t', '    ')
