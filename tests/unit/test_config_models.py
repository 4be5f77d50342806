from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from vertical_import.config.errors import ConfigError, InvalidEntityNameError
from vertical_import.models.config_models import (
    ImportConfiguration,
    Policy,
    validate_entity_name,
)
from vertical_import.models.field_mapping import DirectAttribute, TransformedAttribute


@pytest.mark.parametrize("name", ["Seminar", "seminar", "App::Seminar", "app.models.Seminar"])
def test_valid_entity_names(name):
    assert validate_entity_name(name) == name


@pytest.mark.parametrize(
    "name",
    ["", "Seminar;drop", "seminar_talk", "Seminar2", "os.system('x')", "a..b", ".Seminar", "Seminar."],
)
def test_invalid_entity_names_fail_fast(name):
    with pytest.raises(InvalidEntityNameError):
        ImportConfiguration(entity_type=name, find_by="title")


def test_invalid_entity_name_is_a_config_error():
    with pytest.raises(ConfigError, match="doesn't look like a class name"):
        ImportConfiguration.create("bad name", "title")


def test_class_accepted_as_entity_type(model_factory):
    Seminar = model_factory()
    config = ImportConfiguration(entity_type=Seminar, find_by="title")
    assert config.entity_name == "Seminar"


def test_create_coerces_field_map_and_defaults():
    config = ImportConfiguration.create(
        "Seminar", "title", columns_prefix=None, field_map={"abstract": "description", "publish": {"published": bool}}
    )
    assert config.columns_prefix == ""
    assert config.field_map["abstract"] == DirectAttribute("description")
    assert isinstance(config.field_map["publish"], TransformedAttribute)
    assert config.verbose is True
    assert config.line_break == "<br/>"
    assert config.on_unmapped is Policy.WARN
    assert config.on_invalid is Policy.WARN


def test_configuration_is_immutable():
    config = ImportConfiguration.create("Seminar", "title", field_map={"a": "b"})
    with pytest.raises(FrozenInstanceError):
        config.find_by = "id"  # type: ignore[misc]
    with pytest.raises(TypeError):
        config.field_map["c"] = DirectAttribute("d")  # type: ignore[index]


def test_policy_accepts_strings():
    config = ImportConfiguration("Seminar", "title", on_unmapped="raise", on_invalid="warn")
    assert config.on_unmapped is Policy.RAISE
    assert config.on_invalid is Policy.WARN


def test_verbosity_flag_and_predicate():
    assert ImportConfiguration("Seminar", "title", verbose=True).wants_diagnostic(object())
    assert not ImportConfiguration("Seminar", "title", verbose=False).wants_diagnostic(object())
    assert not ImportConfiguration.create("Seminar", "title", verbose=None).wants_diagnostic(object())

    class Row:
        future = True

    predicate = ImportConfiguration("Seminar", "title", verbose=lambda e: e.future)
    assert predicate.wants_diagnostic(Row())
    Row.future = False
    assert not predicate.wants_diagnostic(Row())
