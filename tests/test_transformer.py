# Copyright 2022 Brian T. Park
#
# MIT License

import unittest
from typing import List

from tzoffsettools.data_types.tz_types import AliasEntry
from tzoffsettools.data_types.tz_types import Cutoff
from tzoffsettools.data_types.tz_types import IdentifierCollisionError
from tzoffsettools.data_types.tz_types import MalformedRecordError
from tzoffsettools.data_types.tz_types import OffsetRecord
from tzoffsettools.data_types.tz_types import TimeOfDay
from tzoffsettools.data_types.tz_types import FixedDay
from tzoffsettools.data_types.tz_types import TimeZoneData
from tzoffsettools.data_types.tz_types import create_zone_offset_database
from tzoffsettools.transformer.transformer import Transformer
from tzoffsettools.transformer.transformer import format_identifier
from tzoffsettools.transformer.transformer import normalize_raw


def _history(*years: int) -> List[OffsetRecord]:
    """Create a history which changes offset at the start of each year, and
    ends with an open-ended record.
    """
    records = [
        OffsetRecord(offset_seconds=i * 3600, until=Cutoff(year))
        for i, year in enumerate(years)
    ]
    records.append(OffsetRecord(offset_seconds=len(years) * 3600, until=None))
    return records


def _data(zones: List[str], links: List[AliasEntry]) -> TimeZoneData:
    data = TimeZoneData()
    for name in zones:
        data.time_zones[name] = _history(1970, 2000)
        data.time_zone_names.append(name)
    data.time_zone_aliases.extend(links)
    return data


class TestFormatIdentifier(unittest.TestCase):
    def test_regular_names(self) -> None:
        self.assertEqual(
            'America_New_York',
            format_identifier('TimeZone', 'America/New_York'))
        self.assertEqual(
            'America_Port_au_Prince',
            format_identifier('TimeZone', 'America/Port-au-Prince'))
        self.assertEqual('EST5EDT', format_identifier('TimeZone', 'EST5EDT'))
        self.assertEqual('UTC', format_identifier('TimeZone', 'UTC'))

    def test_gmt_offsets(self) -> None:
        self.assertEqual(
            'Etc_GMT_Ahead_5', format_identifier('Etc', 'Etc/GMT+5'))
        self.assertEqual(
            'Etc_GMT_Behind_14', format_identifier('Etc', 'Etc/GMT-14'))
        self.assertEqual('GMT_Ahead_0', format_identifier('Etc', 'GMT+0'))
        self.assertEqual('GMT_Behind_0', format_identifier('Etc', 'GMT-0'))
        self.assertEqual('Etc_GMT', format_identifier('Etc', 'Etc/GMT'))

    def test_digits_and_lowercase(self) -> None:
        self.assertEqual('X_123', format_identifier('X', '123'))
        self.assertEqual('T_0', format_identifier('TimeZone', '0'))
        self.assertEqual('Abc_def', format_identifier('TimeZone', 'abc/def'))

    def test_empty_name_fails(self) -> None:
        self.assertRaises(
            MalformedRecordError, format_identifier, 'TimeZone', '')

    def test_normalize_raw(self) -> None:
        self.assertEqual('a    b', normalize_raw('a\tb'))


class TestTransformer(unittest.TestCase):
    def test_empty_owner_fails(self) -> None:
        self.assertRaises(ValueError, Transformer, '')

    def test_transform(self) -> None:
        data = _data(
            ['America/New_York', 'Europe/London'],
            [
                AliasEntry('America/New_York', 'US/Eastern'),
                AliasEntry('Europe/London', 'GB'),
            ],
        )
        tresult = Transformer().transform(data)

        self.assertEqual(
            ['America/New_York', 'Europe/London'], tresult.time_zone_names)
        self.assertEqual(
            {'America/New_York': 0, 'Europe/London': 1}, tresult.zone_ids)
        self.assertEqual({'US/Eastern': 0, 'GB': 1}, tresult.link_ids)
        self.assertEqual(
            {'US/Eastern': 'America/New_York', 'GB': 'Europe/London'},
            tresult.links_map)
        self.assertEqual('US_Eastern', tresult.link_identifiers['US/Eastern'])
        self.assertEqual(
            {
                'america/new_york': 'America_New_York',
                'europe/london': 'Europe_London',
                'us/eastern': 'US_Eastern',
                'gb': 'GB',
            },
            tresult.lookup)
        self.assertEqual(1970, tresult.min_year)
        self.assertEqual(2000, tresult.max_year)
        self.assertEqual({}, tresult.removed_links)
        self.assertEqual({}, tresult.notable_zones)

    def test_links_to_missing_zones_are_removed(self) -> None:
        data = _data(
            ['Europe/London'],
            [
                AliasEntry('Europe/London', 'GB'),
                AliasEntry('America/New_York', 'US/Eastern'),
            ],
        )
        tresult = Transformer().transform(data)
        self.assertEqual({'GB': 'Europe/London'}, tresult.links_map)
        self.assertIn('US/Eastern', tresult.removed_links)
        self.assertNotIn('us/eastern', tresult.lookup)

    def test_link_to_link_fails(self) -> None:
        data = _data(
            ['Europe/London'],
            [
                AliasEntry('Europe/London', 'GB'),
                AliasEntry('GB', 'GB-Eire'),
            ],
        )
        self.assertRaises(MalformedRecordError, Transformer().transform, data)

    def test_link_shadowing_zone_fails(self) -> None:
        data = _data(
            ['Europe/London', 'GB'],
            [AliasEntry('Europe/London', 'GB')],
        )
        self.assertRaises(MalformedRecordError, Transformer().transform, data)

    def test_duplicate_link_fails(self) -> None:
        data = _data(
            ['Europe/London', 'Europe/Dublin'],
            [
                AliasEntry('Europe/London', 'GB'),
                AliasEntry('Europe/Dublin', 'GB'),
            ],
        )
        self.assertRaises(MalformedRecordError, Transformer().transform, data)

    def test_identifier_collision_fails(self) -> None:
        data = _data(['Etc/GMT-0', 'Etc/GMT_Behind_0'], [])
        self.assertRaises(
            IdentifierCollisionError, Transformer().transform, data)

    def test_case_collision_fails(self) -> None:
        data = _data(['Test/Zone'], [AliasEntry('Test/Zone', 'test/zone')])
        with self.assertRaises(IdentifierCollisionError):
            Transformer().transform(data)

    def test_open_ended_record_in_middle_fails(self) -> None:
        data = _data(['Test/Zone'], [])
        data.time_zones['Test/Zone'].insert(
            0, OffsetRecord(offset_seconds=0, until=None))
        self.assertRaises(MalformedRecordError, Transformer().transform, data)

    def test_scale_suffix_is_noted(self) -> None:
        data = TimeZoneData()
        data.time_zones['Test/Zone'] = [
            OffsetRecord(
                0, Cutoff(1970, 1, FixedDay(1), TimeOfDay(2, suffix='u'))),
            OffsetRecord(3600, None),
        ]
        data.time_zone_names.append('Test/Zone')
        tresult = Transformer().transform(data)
        self.assertEqual(
            {"UNTIL time suffix 'u' ignored"},
            tresult.notable_zones['Test/Zone'])

    def test_no_until_years(self) -> None:
        data = TimeZoneData()
        data.time_zones['UTC'] = [OffsetRecord(0, None)]
        data.time_zone_names.append('UTC')
        tresult = Transformer().transform(data)
        self.assertEqual((0, 0), (tresult.min_year, tresult.max_year))

    def test_create_zone_offset_database(self) -> None:
        data = _data(
            ['Europe/London'],
            [
                AliasEntry('Europe/London', 'GB'),
                AliasEntry('Europe/Dublin', 'Eire'),
            ],
        )
        tresult = Transformer().transform(data)
        zidb = create_zone_offset_database(
            tz_version='2022a',
            tz_files=['europe', 'backward'],
            owner='TimeZone',
            tresult=tresult,
        )
        self.assertEqual('2022a', zidb['tz_version'])
        self.assertEqual(1, zidb['num_zones'])
        self.assertEqual(1, zidb['num_links'])
        self.assertEqual(
            {'Eire': ["Target Zone 'Europe/Dublin' missing"]},
            zidb['removed_links'])


if __name__ == '__main__':
    unittest.main()
