from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from vertical_import.config.loader import SCHEMA_PATH

"""Config schema contract test (packaged schema.json)."""

VALID = """
entity: App::Seminar
find_by: title
table: seminars
columns_prefix: COLUMN_
line_break: "<br/>"
encoding: latin-1
verbose: false
on_unmapped: raise
on_invalid: warn
map:
  abstract: description
  publish: {attribute: published, transform: flag}
database:
  dsn: postgresql://localhost/app
"""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_is_valid_draft7():
    jsonschema.Draft7Validator.check_schema(_schema())


def test_full_example_is_valid():
    jsonschema.validate(yaml.safe_load(VALID), _schema())


def test_minimal_example_is_valid():
    jsonschema.validate({"entity": "Seminar", "find_by": "title"}, _schema())


@pytest.mark.parametrize(
    "patch",
    [
        {"find_by": None},
        {"table": "seminars; drop"},
        {"verbose": "yes"},
        {"on_unmapped": "ignore"},
        {"map": {"abstract": "not an identifier"}},
        {"map": {"publish": {"transform": "flag"}}},
        {"map": {"publish": {"attribute": "published", "extra": 1}}},
        {"database": {"port": "5432"}},
        {"unknown_key": 1},
    ],
)
def test_invalid_examples_are_rejected(patch):
    data = yaml.safe_load(VALID)
    for key, value in patch.items():
        if value is None:
            data.pop(key)
        else:
            data[key] = value
    with pytest.raises(ValidationError):
        jsonschema.validate(data, _schema())
