#!/usr/bin/env python3
#
# Copyright 2018 Brian T. Park
#
# MIT License.

"""
Read the raw TZ Database files at the location specified by `--input_dir` (or
the explicit list of files given by `--input_files`). Generate the output files
selected by `--actions`.

The compiler has a number of stages implemented by various helper classes:

* Extractor
    * Parse the Zone and Link entries of the raw TZDB files into the
      TimeZoneData (offset histories, zone names, aliases).
* Transformer
    * Validate the TimeZoneData, assign zone ids, and create the normalized
      identifiers and the case-insensitive lookup table.
* Generator
    * Generate the various files requested by the `--actions` flag.

Informational Flags:

* --tz_version
    * Pass through flag to identify the TZDB version.

Workflow Flags:

* `--actions` flag is a comma-separated list of output formats
    * json: Generate the `zonedb.json` file
    * zonelist: Generate a raw list of zone names in 'zones.txt' file.
    * python: Generate the `zone_offsets.py` module
    * blob: Generate the `zone_offsets.bin` binary table

Extractor Flags:

* `--input_dir`
    * Location of the raw TZDB files. Reads Extractor.ZONE_FILES.
* `--input_files`
    * Comma-separated list of TZDB files, processed in the given order.

Transformer Flags:

* `--owner`
    * Name of the generated enum. Its first letter prefixes identifiers which
      would otherwise be all digits.

Generator Flags:

* `--output_dir {dir}`
    * The directory where various files should be created.
    * If empty, it means the same as $PWD.
* JsonGenerator
    * --json_file {file}
        * Name of the JSON file (e.g. `zonedb.json`)

Examples:

    $ tzcompiler.py --input_dir ../tz --tz_version 2022a \
        --actions json,python --output_dir out
"""

import argparse
import logging
import sys
from typing import List
from typing import Set
from typing_extensions import Protocol

from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase
from tzoffsettools.data_types.tz_types import TimeZoneData
from tzoffsettools.data_types.tz_types import create_zone_offset_database
from tzoffsettools.data_types.tz_types import DEFAULT_OWNER
from tzoffsettools.extractor.extractor import Extractor
from tzoffsettools.transformer.transformer import Transformer
from tzoffsettools.generator.blobgenerator import BlobGenerator
from tzoffsettools.generator.jsongenerator import JsonGenerator
from tzoffsettools.generator.pygenerator import PythonGenerator
from tzoffsettools.generator.zonelistgenerator import ZoneListGenerator

ALLOWED_ACTIONS = {'json', 'zonelist', 'python', 'blob'}


class Generator(Protocol):
    """Define an interface for Generator subclasses for mypy type checking."""
    def generate_files(self, name: str) -> None:
        ...


def create_generators(
    actions: Set[str],
    invocation: str,
    json_file: str,
    zidb: ZoneOffsetDatabase,
) -> List[Generator]:
    """Return the generators selected by the '--actions' flag, in a stable
    order.
    """
    generators: List[Generator] = []
    if 'json' in actions:
        generators.append(JsonGenerator(zidb=zidb, json_file=json_file))
    if 'zonelist' in actions:
        generators.append(ZoneListGenerator(invocation=invocation, zidb=zidb))
    if 'python' in actions:
        generators.append(PythonGenerator(invocation=invocation, zidb=zidb))
    if 'blob' in actions:
        generators.append(BlobGenerator(zidb=zidb))
    return generators


def add_input_flags(parser: argparse.ArgumentParser) -> None:
    """Add the Extractor flags, shared with zoneoffset.py."""
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        '--input_dir', help='Location of the input directory')
    group.add_argument(
        '--input_files',
        help='Comma-separated list of TZDB files, processed in order',
    )


def extract(input_dir: str, input_files: str) -> TimeZoneData:
    """Run the Extractor over '--input_dir' or '--input_files'."""
    logging.info('======== Extracting TZ Data files')
    extractor = Extractor(input_dir or '')
    if input_files:
        extractor.parse_files(input_files.split(','))
    else:
        extractor.parse()
    extractor.print_summary()
    return extractor.get_data()


def input_file_names(input_files: str) -> List[str]:
    if input_files:
        return input_files.split(',')
    return list(Extractor.ZONE_FILES)


def main() -> None:
    """
    Main driver for the TZ Database compiler which parses the IANA TZ Database
    files and generates the zone offset tables at --output_dir.

    Usage:
        tzcompiler.py [flags...]
    """
    # Configure command line flags.
    parser = argparse.ArgumentParser(description='Generate Zone Offsets.')

    # Target action (i.e. output) selector.
    parser.add_argument(
        '--actions',
        help='Comma-separated list of actions or targets '
             '(json|zonelist|python|blob)',
        default='json',
    )

    # Extractor flags.
    add_input_flags(parser)

    # Transformer flags.
    parser.add_argument(
        '--owner',
        help=f'Name of the zone enum (default: {DEFAULT_OWNER})',
        default=DEFAULT_OWNER,
    )

    # For action=json, specify the output file.
    parser.add_argument(
        '--json_file',
        help='The JSON output file (default: zonedb.json)',
        default='zonedb.json',
    )

    # The tz_version does not affect any data processing. Its value is
    # copied into the various generated files and usually placed in the
    # comments section to describe the source of the data that generated the
    # various files.
    parser.add_argument(
        '--tz_version',
        help='Version string of the TZ files',
        required=True,
    )

    # Target location of the generated files.
    parser.add_argument(
        '--output_dir',
        help='Location of the output directory',
        default='',
    )

    # Parse the command line arguments
    args = parser.parse_args()

    # Validate the comma-separated --actions flag.
    actions = set(args.actions.split(','))
    if not actions.issubset(ALLOWED_ACTIONS):
        print(f'Invalid --actions: {actions - ALLOWED_ACTIONS}')
        sys.exit(1)

    # Configure logging. This should normally be executed after the
    # parser.parse_args() because it allows us set the logging.level using a
    # flag.
    logging.basicConfig(level=logging.INFO)

    # How the script was invoked
    invocation = ' '.join(sys.argv)

    logging.info('======== TZ Compiler settings')
    logging.info(f'Actions: {sorted(actions)}')
    logging.info(f'Owner: {args.owner}')
    logging.info(f'TZ Version: {args.tz_version}')

    # Extract the TZ files
    data = extract(args.input_dir, args.input_files)

    # Validate and derive the identifiers.
    logging.info('======== Transforming Zones and Links')
    transformer = Transformer(owner=args.owner)
    tresult = transformer.transform(data)
    transformer.print_summary(tresult)

    # Collect TZ DB data into a single JSON-serializable object.
    zidb = create_zone_offset_database(
        tz_version=args.tz_version,
        tz_files=input_file_names(args.input_files),
        owner=args.owner,
        tresult=tresult,
    )

    # Perform one or more actions.
    logging.info('======== Performing actions, generating files')
    for generator in create_generators(
        actions=actions,
        invocation=invocation,
        json_file=args.json_file,
        zidb=zidb,
    ):
        generator.generate_files(args.output_dir)

    logging.info('======== Finished processing TZ Data files.')


if __name__ == '__main__':
    main()
