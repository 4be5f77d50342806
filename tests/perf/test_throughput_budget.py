from __future__ import annotations

import time
from pathlib import Path

import pytest

from vertical_import.dump.scanner import read_dump_file
from vertical_import.models.config_models import ImportConfiguration
from vertical_import.services.importer import import_file

"""Performance budget for scanning and mapping.

- 50k generated rows must scan at >= 5000 rows/sec
- mapping every row into entities (consumer mode, no store) at >= 2000 rows/sec

Budgets are loose so that shared CI runners pass; they catch accidental
quadratic behaviour (e.g. string re-joins per continuation), not tuning.
"""


@pytest.fixture(scope="module")
def big_dump(tmp_path_factory, dump_generator) -> Path:
    path = tmp_path_factory.mktemp("perf") / "items.txt"
    return dump_generator.write_dump(path, rows=50_000)


def test_scan_throughput_50k_rows(big_dump: Path):
    start = time.perf_counter()
    count = sum(1 for _ in read_dump_file(big_dump, prefix="COLUMN_"))
    elapsed = time.perf_counter() - start

    assert count == 50_000
    throughput = count / elapsed
    assert throughput >= 5000.0, f"scan throughput {throughput:.0f} rows/sec below 5000"


def test_mapping_throughput_50k_rows(big_dump: Path, model_factory):
    Item = model_factory(
        "Item", columns=("id", "title", "category", "amount", "publish", "date", "abstract"), required=()
    )
    config = ImportConfiguration.create(Item, "id", columns_prefix="COLUMN_")
    seen = 0

    def consume(entity):
        nonlocal seen
        seen += 1

    start = time.perf_counter()
    result = import_file(big_dump, config, consume)
    elapsed = time.perf_counter() - start

    assert seen == result.yielded == 50_000
    assert result.unmapped_fields == 0
    throughput = seen / elapsed
    assert throughput >= 2000.0, f"mapping throughput {throughput:.0f} rows/sec below 2000"


@pytest.mark.smoke
def test_scan_smoke_5k_rows(tmp_path: Path, dump_generator):
    path = dump_generator.write_dump(tmp_path / "small.txt", rows=5_000)
    start = time.perf_counter()
    rows = list(read_dump_file(path, prefix="COLUMN_"))
    elapsed = time.perf_counter() - start
    assert len(rows) == 5_000
    assert rows[-1].fields["id"] == "5000"
    assert elapsed < 10.0, f"5k row scan took {elapsed:.3f}s"
