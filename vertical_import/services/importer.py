from __future__ import annotations

import importlib
import logging
import warnings
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import closing
from pathlib import Path
from typing import Any

from ..config.errors import EntityResolutionError
from ..dump.scanner import build_field_pattern, read_dump_file, scan_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfiguration, validate_entity_name
from ..models.entity import ImportableModel
from ..models.error_record import ErrorRecord
from ..models.field_mapping import Unrecognized
from ..models.import_result import ImportResult, Outcome, ResultAccumulator
from ..models.raw_row import RawRow
from .reconciler import populate, save_or_update

"""Import entry points.

- import_file / import_lines: scan, map and reconcile in a single pass
- iter_entities: yield populated (unvalidated, unsaved) entities instead
- import_dump: legacy forwarding shim, deprecated

Configuration problems (bad entity name, unknown model, bad prefix) raise
before the first row is read. Row-level problems never stop the pass unless
the configuration asks for Policy.RAISE.
"""

__all__ = [
    "Consumer",
    "resolve_entity_type",
    "import_rows",
    "import_lines",
    "import_file",
    "iter_entities",
    "import_dump",
]

logger = logging.getLogger(__name__)

Consumer = Callable[[Any], Any]

_legacy_notice_shown = False


def _classify(name: str) -> str:
    # "seminar" -> "Seminar"
    return name[:1].upper() + name[1:]


def resolve_entity_type(
    identifier: str | type, registry: Mapping[str, type] | None = None
) -> type:
    """Turn an entity type identifier into a model class.

    Lookup order: ``registry`` (exact name, then classified name), then a
    dotted import path such as ``app.models.Seminar`` (``::`` also accepted).

    Raises:
        InvalidEntityNameError: identifier is not a valid type name
        EntityResolutionError: identifier names no usable model
    """
    if isinstance(identifier, type):
        model = identifier
    else:
        validate_entity_name(identifier)
        model = None
        if registry:
            model = registry.get(identifier) or registry.get(_classify(identifier))
        if model is None:
            model = _import_model(identifier)

    if not isinstance(model, type) or not issubclass(model, ImportableModel):
        raise EntityResolutionError(f"{identifier!r} is not an importable model class")
    return model


def _import_model(identifier: str) -> type:
    module_name, _, class_name = identifier.replace("::", ".").rpartition(".")
    if not module_name:
        raise EntityResolutionError(f"unknown entity type {identifier!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EntityResolutionError(f"cannot import {module_name!r} for {identifier!r}: {e}") from e
    model = getattr(module, class_name, None) or getattr(module, _classify(class_name), None)
    if model is None:
        raise EntityResolutionError(f"{module_name!r} has no model named {class_name!r}")
    return model


def import_rows(
    rows: Iterable[RawRow],
    config: ImportConfiguration,
    consumer: Consumer | None = None,
    *,
    model: type | None = None,
    registry: Mapping[str, type] | None = None,
    source: str = "<rows>",
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Map and reconcile (or hand to ``consumer``) every row, in order.

    When ``consumer`` is given, each populated entity is passed to it exactly
    once and nothing is validated or persisted.
    """
    if model is None:
        model = resolve_entity_type(config.entity_type, registry)
    acc = ResultAccumulator()
    entity_name = config.entity_name

    for row in rows:

        def _report_transform(name: str, message: str, line: int = row.line_number) -> None:
            if error_log is not None:
                error_log.append(ErrorRecord.create(source, line, entity_name, "TRANSFORM_ERROR", message))

        entity, unmapped = populate(row, model, config, report=_report_transform)
        acc.add_unmapped(len(unmapped))
        if error_log is not None:
            for name in unmapped:
                error_type = (
                    "UNRECOGNIZED_MAPPING"
                    if isinstance(config.field_map.get(name), Unrecognized)
                    else "UNMAPPED_FIELD"
                )
                error_log.append(
                    ErrorRecord.create(source, row.line_number, entity_name, error_type, name)
                )

        if consumer is not None:
            consumer(entity)
            acc.add(Outcome.YIELDED)
            continue

        def _report(errors: list[str], line: int = row.line_number) -> None:
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(source, line, entity_name, "VALIDATION_ERROR", "; ".join(errors))
                )

        outcome = save_or_update(entity, config, report=_report)
        acc.add(outcome)
        logger.debug("row at line %d: %s", row.line_number, outcome.value)

    return acc.finish()


def import_lines(
    lines: Iterable[str],
    config: ImportConfiguration,
    consumer: Consumer | None = None,
    *,
    registry: Mapping[str, type] | None = None,
    source: str = "<lines>",
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import from an iterable of text lines (e.g. ``text.splitlines()``)."""
    model = resolve_entity_type(config.entity_type, registry)
    pattern = build_field_pattern(config.columns_prefix)
    rows = scan_rows(lines, pattern, config.line_break)
    return import_rows(
        rows, config, consumer, model=model, source=source, error_log=error_log
    )


def import_file(
    path: Path | str,
    config: ImportConfiguration,
    consumer: Consumer | None = None,
    *,
    registry: Mapping[str, type] | None = None,
    encoding: str = "utf-8",
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import one dump file. The file is closed on every exit path."""
    model = resolve_entity_type(config.entity_type, registry)
    rows = read_dump_file(path, config.columns_prefix, config.line_break, encoding)
    try:
        return import_rows(
            rows, config, consumer, model=model, source=Path(path).name, error_log=error_log
        )
    finally:
        rows.close()


def iter_entities(
    path: Path | str,
    config: ImportConfiguration,
    *,
    registry: Mapping[str, type] | None = None,
    encoding: str = "utf-8",
) -> Iterator[Any]:
    """Yield one populated entity per row without validating or saving it."""
    model = resolve_entity_type(config.entity_type, registry)
    rows = read_dump_file(path, config.columns_prefix, config.line_break, encoding)
    return _iter_populated(rows, model, config)


def _iter_populated(rows: Iterator[RawRow], model: type, config: ImportConfiguration) -> Iterator[Any]:
    with closing(rows):
        for row in rows:
            entity, _ = populate(row, model, config)
            yield entity


def import_dump(
    file_name: Path | str,
    options: Mapping[str, Any],
    consumer: Consumer | None = None,
    *,
    registry: Mapping[str, type] | None = None,
) -> ImportResult:
    """Deprecated: use ``import_file`` with an ImportConfiguration.

    ``options`` uses the legacy keys ``class_name``, ``find_by``,
    ``db_columns_prefix``, ``map`` and ``verbose``.
    """
    global _legacy_notice_shown
    if not _legacy_notice_shown:
        _legacy_notice_shown = True
        warnings.warn(
            "import_dump() is obsolete; use import_file() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        logger.warning("import_dump() is obsolete. You should use import_file() instead.")

    config = ImportConfiguration.create(
        entity_type=options.get("class_name", ""),
        find_by=options.get("find_by", ""),
        columns_prefix=options.get("db_columns_prefix", ""),
        field_map=options.get("map"),
        verbose=options["verbose"] if "verbose" in options else True,
    )
    return import_file(file_name, config, consumer, registry=registry)
