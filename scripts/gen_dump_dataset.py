#!/usr/bin/env python3
"""Generate a synthetic vertical dump for performance testing.

The output mimics ``mysql -E``::

    *************************** 1. row ***************************
    COLUMN_id: 1
    COLUMN_title: Item_1234_A
    COLUMN_abstract: Description for item 1
    continued on a second line
    ...

Every fourth row carries a multi-line ``abstract`` so continuation handling is
exercised as well.
"""
from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator
from pathlib import Path

import numpy as np

MARKER_STARS = "*" * 27


def generate_lines(rows: int, prefix: str = "COLUMN_", seed: int = 42) -> Iterator[str]:
    rng = np.random.RandomState(seed)
    categories = ["Electronics", "Clothing", "Books", "Food", "Sports", "Home"]
    for n in range(1, rows + 1):
        yield f"{MARKER_STARS} {n}. row {MARKER_STARS}\n"
        yield f"{prefix}id: {n}\n"
        yield f"{prefix}title: Item_{rng.randint(1000, 9999)}_{chr(65 + n % 26)}\n"
        yield f"{prefix}category: {rng.choice(categories)}\n"
        yield f"{prefix}amount: {rng.uniform(0.01, 9999.99):.2f}\n"
        yield f"{prefix}publish: {rng.randint(0, 2)}\n"
        yield f"{prefix}date: 2024-{rng.randint(1, 13):02d}-{rng.randint(1, 29):02d}\n"
        if n % 4 == 0:
            yield f"{prefix}abstract: Description for item {n}\n"
            yield "continued on a second line\n"
            yield "\tand a third one\n"
        else:
            yield f"{prefix}abstract: Description for item {n}\n"


def write_dump(path: Path, rows: int, prefix: str = "COLUMN_", seed: int = 42) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.writelines(generate_lines(rows, prefix, seed))
    return path


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    p.add_argument("output", type=Path)
    p.add_argument("--rows", type=int, default=10_000)
    p.add_argument("--prefix", default="COLUMN_")
    p.add_argument("--seed", type=int, default=42)
    args = p.parse_args(argv)
    if args.rows < 0:
        print("--rows must be >= 0", file=sys.stderr)
        return 1
    write_dump(args.output, args.rows, args.prefix, args.seed)
    print(f"wrote {args.rows} rows to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
