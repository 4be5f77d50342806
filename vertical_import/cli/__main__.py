from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from vertical_import.config.loader import ConfigError, FileConfig, load_config
from vertical_import.db.connection import db_cursor
from vertical_import.db.statements import StatementError
from vertical_import.db.table_model import permissive_model, reflect_table
from vertical_import.dump.preview import preview_frame
from vertical_import.logging.error_log import ErrorLogBuffer
from vertical_import.logging.init import log_summary, setup_logging
from vertical_import.models.config_models import validate_entity_name
from vertical_import.models.import_result import ImportResult
from vertical_import.services.importer import Consumer, import_file
from vertical_import.services.progress import ProgressTracker
from vertical_import.services.reconciler import ImportAbortedError
from vertical_import.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env, then the YAML config
- validate the entity name and check the dump files exist
- reflect the target table (or build a permissive model for --dry-run)
- import each dump file, flush the error log, print the SUMMARY line

Exit codes: 0 every row stored (or printed), 2 some rows rejected, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="vertical-import", description="Vertical dump (mysql -E) -> PostgreSQL importer"
    )
    p.add_argument("dumps", nargs="+", type=Path, help="Dump files to import, in order")
    p.add_argument("--config", type=Path, default=Path("config/import.yml"), help="YAML config file")
    p.add_argument("--dry-run", action="store_true", help="Print mapped records as JSON lines, no database")
    p.add_argument("--inspect-data", action="store_true", help="Print the first rows of each dump then exit")
    p.add_argument("--quiet", action="store_true", help="Do not report rejected records")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _model_name(entity: str) -> str:
    last = entity.replace("::", ".").rpartition(".")[2]
    return last[:1].upper() + last[1:]


def _inspect_data(cfg: FileConfig, dumps: list[Path]) -> int:
    for path in dumps:
        print(f"FILE: {path.name}")
        frame = preview_frame(path, cfg.columns_prefix, cfg.line_break, cfg.encoding)
        if frame.empty:
            print("  (no rows)")
            continue
        print(frame.to_string())
    return EXIT_SUCCESS_ALL


def _print_record(entity: Any) -> None:
    print(json.dumps(entity.attributes(), ensure_ascii=False, default=str))


def _run_imports(
    cfg: FileConfig,
    dumps: list[Path],
    registry: Mapping[str, type],
    consumer: Consumer | None,
    error_log: ErrorLogBuffer,
) -> ImportResult:
    config = cfg.to_import_configuration()
    results: list[ImportResult] = []
    with ProgressTracker(len(dumps)) as progress:
        for path in dumps:
            progress.start_file(path)
            result = import_file(
                path,
                config,
                consumer,
                registry=registry,
                encoding=cfg.encoding,
                error_log=error_log,
            )
            results.append(result)
            progress.set_postfix(rows=result.rows, invalid=result.invalid)
            progress.finish_file()
    return ImportResult.merge(results)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # An explicit [] must not fall back to sys.argv (pytest arguments would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
        validate_entity_name(cfg.entity)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    missing = [str(p) for p in args.dumps if not p.is_file()]
    if missing:
        logger.error(f"dump file not found: {', '.join(missing)}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, args.dumps)

    if args.quiet:
        cfg = dataclasses.replace(cfg, verbose=False)

    error_log = ErrorLogBuffer()
    mode = "dry-run" if args.dry_run else "live"
    logger.info(f"mode={mode} entity={cfg.entity} table={cfg.table} files={len(args.dumps)}")

    try:
        if args.dry_run:
            registry = {cfg.entity: permissive_model(_model_name(cfg.entity), cfg.table)}
            result = _run_imports(cfg, args.dumps, registry, _print_record, error_log)
        else:
            with db_cursor(cfg.database) as cur:
                registry = {cfg.entity: reflect_table(cur, cfg.table, _model_name(cfg.entity))}
                result = _run_imports(cfg, args.dumps, registry, None, error_log)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except ImportAbortedError as e:
        logger.error(f"aborted: {e}")
        _flush_error_log(error_log)
        return EXIT_FATAL
    except (StatementError, psycopg2.Error) as e:
        logger.error(f"database: {e}")
        _flush_error_log(error_log)
        return EXIT_FATAL
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"read: {e}")
        _flush_error_log(error_log)
        return EXIT_FATAL

    _flush_error_log(error_log)
    log_summary(render_summary_line(len(args.dumps), result)[len("SUMMARY "):])

    if result.invalid > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        setup_logging().warning(f"could not write error log: {e}")
        return
    if path is not None:
        setup_logging().info(f"error log written: {path}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
