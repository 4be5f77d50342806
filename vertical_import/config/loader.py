from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_LINE_BREAK, ImportConfiguration, Policy
from ..models.field_mapping import DirectAttribute, FieldMapping, TransformedAttribute
from ..services.transforms import get_transform
from .errors import ConfigError

"""YAML configuration loader.

Responsibilities:
- Load the YAML file (default ``config/import.yml``)
- Validate it against the packaged JSON schema (``schema.json``)
- Apply defaults and resolve named transforms
- Build the runtime ImportConfiguration
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "FileConfig",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "schema.json"


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection fallback; environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class FileConfig:
    entity: str
    find_by: str
    table: str
    columns_prefix: str = ""
    line_break: str = DEFAULT_LINE_BREAK
    encoding: str = "utf-8"
    verbose: bool = True
    on_unmapped: Policy = Policy.WARN
    on_invalid: Policy = Policy.WARN
    field_map: dict[str, FieldMapping] = field(default_factory=dict)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def to_import_configuration(self, entity_type: str | type | None = None) -> ImportConfiguration:
        """Runtime configuration; ``entity_type`` overrides the configured name."""
        return ImportConfiguration(
            entity_type=entity_type if entity_type is not None else self.entity,
            find_by=self.find_by,
            columns_prefix=self.columns_prefix,
            field_map=self.field_map,
            verbose=self.verbose,
            line_break=self.line_break,
            on_unmapped=self.on_unmapped,
            on_invalid=self.on_invalid,
        )


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or data not valid
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_field_map(raw: dict[str, Any]) -> dict[str, FieldMapping]:
    field_map: dict[str, FieldMapping] = {}
    for column, entry in raw.items():
        if isinstance(entry, str):
            field_map[column] = DirectAttribute(entry)
        elif entry.get("transform"):
            field_map[column] = TransformedAttribute(entry["attribute"], get_transform(entry["transform"]))
        else:
            field_map[column] = DirectAttribute(entry["attribute"])
    return field_map


def load_config(path: Path) -> FileConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return FileConfig(
        entity=data["entity"],
        find_by=data["find_by"],
        table=data.get("table") or data["entity"].replace("::", ".").rpartition(".")[2].lower(),
        columns_prefix=data.get("columns_prefix") or "",
        line_break=data.get("line_break", DEFAULT_LINE_BREAK),
        encoding=data.get("encoding", "utf-8"),
        verbose=data.get("verbose", True),
        on_unmapped=Policy(data.get("on_unmapped", "warn")),
        on_invalid=Policy(data.get("on_invalid", "warn")),
        field_map=_build_field_map(data.get("map") or {}),
        database=db,
    )
