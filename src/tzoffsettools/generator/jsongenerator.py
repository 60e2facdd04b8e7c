# Copyright 2020 Brian T. Park
#
# MIT License

from typing import Any
from typing import Dict
from typing import List
import os
import logging
import json

from tzoffsettools.data_types.tz_types import OffsetRecord
from tzoffsettools.data_types.tz_types import ZoneOffsetDatabase
from tzoffsettools.data_types.tz_types import cutoff_to_dict


# Serializer for Set(). See
# https://researchdatapod.com/how-to-solve-python-typeerror-object-of-type-set-is-not-json-serializable/
def serialize_sets(obj: Any) -> List[Any]:
    if isinstance(obj, set):
        return sorted(obj)
    raise TypeError("Type %s is not serializable" % type(obj))


def record_to_dict(record: OffsetRecord) -> Dict[str, Any]:
    """OffsetRecord is a NamedTuple, which json would render as a plain
    array, so convert it into a dict explicitly.
    """
    return {
        'offset_seconds': record.offset_seconds,
        'until': cutoff_to_dict(record.until),
        'rules': record.rules,
        'format': record.format,
        'raw_line': record.raw_line,
    }


class JsonGenerator:
    """Generate the JSON representation of the ZoneOffsetDatabase to the given
    'json_file'.
    """
    def __init__(
        self,
        zidb: ZoneOffsetDatabase,
        json_file: str
    ):
        self.zidb = zidb
        self.json_file = json_file

    def to_json_object(self) -> Dict[str, Any]:
        result: Dict[str, Any] = dict(self.zidb)
        result['time_zones'] = {
            name: [record_to_dict(record) for record in history]
            for name, history in self.zidb['time_zones'].items()
        }
        return result

    def generate_files(self, output_dir: str) -> None:
        """Serialize ZoneOffsetDatabase to the specified file."""
        full_filename = os.path.join(output_dir, self.json_file)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            json.dump(
                self.to_json_object(), output_file, indent=2,
                default=serialize_sets,
            )
            print(file=output_file)  # add terminating newline
        logging.info("Created %s", full_filename)
