# Copyright 2020 Brian T. Park
#
# MIT License

import logging
import os

from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase


class ZoneListGenerator:
    """Create a list of zone names in discovery order, followed by the link
    names, in a file named 'zones.txt'.
    """
    ZONES_FILE_NAME = 'zones.txt'

    def __init__(self, invocation: str, zidb: ZoneOffsetDatabase):
        self.invocation = invocation
        self.tz_version = zidb['tz_version']
        self.names = zidb['time_zone_names']
        self.links_map = zidb['links_map']

    def generate_files(self, output_dir: str) -> None:
        full_filename = os.path.join(output_dir, self.ZONES_FILE_NAME)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            print(self.generate_list(), end='', file=output_file)
        logging.info("Created %s", full_filename)

    def generate_list(self) -> str:
        lines = [
            '# This file was generated by the following script:',
            '#',
            f'#   $ {self.invocation}',
            '#',
            '# from https://github.com/eggert/tz/releases/tag/'
            f'{self.tz_version}',
            '#',
            f'# Zones: {len(self.names)}',
            f'# Links: {len(self.links_map)}',
        ]
        lines.extend(self.names)
        lines.append('# Links')
        lines.extend(
            f'{link_name} -> {zone_name}'
            for link_name, zone_name in self.links_map.items()
        )
        return '\n'.join(lines) + '\n'
