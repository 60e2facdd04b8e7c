# Copyright 2022 Brian T. Park
#
# MIT License

"""
Split the raw lines of the TZ Database files into fields, and classify each
line into one of the record kinds understood by the Extractor.
"""

import re
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Union

# Fields are separated by runs of spaces and tabs.
FIELD_SEPARATOR = re.compile(r'[ \t]+')


class ZoneLine(NamedTuple):
    """'Zone NAME STDOFF RULES FORMAT [UNTIL]'"""
    fields: List[str]


class ContinuationLine(NamedTuple):
    """Indented 'STDOFF RULES FORMAT [UNTIL]' following a ZoneLine."""
    fields: List[str]


class LinkLine(NamedTuple):
    """'Link TARGET LINK-NAME'"""
    fields: List[str]


class OtherLine(NamedTuple):
    """Any other record, e.g. 'Rule'. Ignored, but ends the current Zone."""
    fields: List[str]


LineKind = Union[ZoneLine, ContinuationLine, LinkLine, OtherLine]


def strip_comment(line: str) -> str:
    """Remove everything from the first '#' which is not inside a
    double-quoted field.
    """
    in_quotes = False
    for i, c in enumerate(line):
        if c == '"':
            in_quotes = not in_quotes
        elif c == '#' and not in_quotes:
            return line[:i]
    return line


def split_fields(line: str) -> List[str]:
    """Split the line into whitespace separated fields, ignoring comments.
    Returns an empty list if nothing remains.
    """
    line = strip_comment(line).strip()
    if not line:
        return []
    return FIELD_SEPARATOR.split(line)


def is_ignorable(line: str) -> bool:
    """Blank lines and whole-line comments carry no record."""
    stripped = line.strip()
    return not stripped or stripped.startswith('#')


def classify_line(line: str) -> Optional[LineKind]:
    """Return the record kind of the given line, or None if the line is blank
    or only a comment.
    """
    line = line.rstrip('\r\n')
    if is_ignorable(line):
        return None

    fields = split_fields(line)
    if not fields:
        return None
    if line[0] in ' \t':
        return ContinuationLine(fields)
    if fields[0] == 'Zone':
        return ZoneLine(fields)
    if fields[0] == 'Link':
        return LinkLine(fields)
    return OtherLine(fields)
