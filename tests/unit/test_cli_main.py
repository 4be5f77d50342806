from __future__ import annotations
import json
import os
from pathlib import Path
from vertical_import.cli import main as cli_main


def _run(argv: list[str], capsys):
    code = cli_main(argv)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_cli_dry_run_prints_records_as_json(write_config, write_dump: Path, capsys):
    code, out, err = _run(["--dry-run", str(write_dump)], capsys)
    assert code == 0
    records = [json.loads(line) for line in out.strip().splitlines()]
    assert records == [
        {"title": "Foo", "date": "2020-01-01", "description": "line one<br/>line two", "published": True},
        {"title": "Bar", "published": False, "room": "B 101"},
    ]
    assert "INFO mode=dry-run entity=Seminar table=seminars files=1" in err
    assert "SUMMARY files=1/1 rows=2 inserted=0 updated=0 invalid=0 yielded=2 unmapped=0" in err


def test_cli_missing_config(temp_workdir: Path, write_dump: Path, capsys):
    code, out, err = _run([str(write_dump)], capsys)
    assert code == 1
    assert "ERROR config: config file not found" in err
    assert out == ""


def test_cli_explicit_config_path(write_config: Path, write_dump: Path, temp_workdir: Path, capsys):
    moved = temp_workdir / "seminars.yml"
    write_config.rename(moved)
    code, _, err = _run(["--config", str(moved), "--dry-run", str(write_dump)], capsys)
    assert code == 0
    assert "SUMMARY" in err


def test_cli_invalid_entity_name(write_config: Path, write_dump: Path, capsys):
    text = write_config.read_text(encoding="utf-8").replace("entity: Seminar", "entity: 'Seminar; drop'")
    write_config.write_text(text, encoding="utf-8")
    code, _, err = _run(["--dry-run", str(write_dump)], capsys)
    assert code == 1
    assert "doesn't look like a class name" in err


def test_cli_missing_dump_file(write_config, temp_workdir: Path, capsys):
    code, _, err = _run(["--dry-run", str(temp_workdir / "data" / "nope.txt")], capsys)
    assert code == 1
    assert "ERROR dump file not found:" in err


def test_cli_inspect_data(write_config, write_dump: Path, capsys):
    code, out, _ = _run(["--inspect-data", str(write_dump)], capsys)
    assert code == 0
    assert "FILE: seminars.txt" in out
    assert "line one<br/>line two" in out
    assert "room" in out


def test_cli_inspect_data_empty_dump(write_config, temp_workdir: Path, capsys):
    empty = temp_workdir / "data" / "empty.txt"
    empty.write_text("", encoding="utf-8")
    code, out, _ = _run(["--inspect-data", str(empty)], capsys)
    assert code == 0
    assert "(no rows)" in out


def test_cli_debug_mode(write_config, write_dump: Path, capsys):
    code, _, err = _run(["--debug", "--dry-run", str(write_dump)], capsys)
    assert code == 0
    assert "DEBUG debug mode enabled" in err


def test_cli_dry_run_accepts_every_column(write_config, write_dump: Path, capsys):
    # the permissive dry-run model accepts every column
    _, _, err = _run(["--dry-run", str(write_dump)], capsys)
    assert "don't know how to set" not in err


def test_cli_env_file_is_loaded(write_config, write_dump: Path, temp_workdir: Path, capsys, monkeypatch):
    monkeypatch.setenv("VERTICAL_IMPORT_TEST_MARKER", "process")
    (temp_workdir / ".env").write_text("VERTICAL_IMPORT_TEST_MARKER=loaded\n", encoding="utf-8")
    code, _, _ = _run(["--dry-run", str(write_dump)], capsys)
    assert code == 0
    assert os.environ.get("VERTICAL_IMPORT_TEST_MARKER") == "loaded"
