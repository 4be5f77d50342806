from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

"""Import result models: per-row outcome and aggregated run metrics."""

__all__ = [
    "Outcome",
    "ImportResult",
    "ResultAccumulator",
]


class Outcome(Enum):
    """What happened to one row.

    - INSERTED: no matching record, new record stored
    - UPDATED: matching record found, non-null attributes merged into it
    - INVALID: validation failed, nothing stored
    - YIELDED: entity handed to the caller's consumer, nothing validated or stored
    """
    INSERTED = "inserted"
    UPDATED = "updated"
    INVALID = "invalid"
    YIELDED = "yielded"


@dataclass(frozen=True)
class ImportResult:
    """Aggregated results of one or more import passes (SUMMARY line source)."""
    files: int
    rows: int
    inserted: int
    updated: int
    invalid: int
    yielded: int
    unmapped_fields: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float

    @property
    def stored(self) -> int:
        return self.inserted + self.updated

    @staticmethod
    def merge(results: list[ImportResult]) -> ImportResult:
        """Combine per-file results into a single run result."""
        if not results:
            now = datetime.now(UTC)
            return ResultAccumulator(start_time=now).finish(files=0, end_time=now)
        start = min(r.start_time for r in results)
        end = max(r.end_time for r in results)
        elapsed = sum(r.elapsed_seconds for r in results)
        rows = sum(r.rows for r in results)
        return ImportResult(
            files=sum(r.files for r in results),
            rows=rows,
            inserted=sum(r.inserted for r in results),
            updated=sum(r.updated for r in results),
            invalid=sum(r.invalid for r in results),
            yielded=sum(r.yielded for r in results),
            unmapped_fields=sum(r.unmapped_fields for r in results),
            start_time=start,
            end_time=end,
            elapsed_seconds=elapsed,
            throughput_rows_per_sec=(rows / elapsed) if elapsed > 0 else 0.0,
        )


class ResultAccumulator:
    """Mutable counters collected while a pass runs."""

    def __init__(self, start_time: datetime | None = None) -> None:
        self.start_time = start_time or datetime.now(UTC)
        self.counts: dict[Outcome, int] = {o: 0 for o in Outcome}
        self.unmapped_fields = 0

    @property
    def rows(self) -> int:
        return sum(self.counts.values())

    def add(self, outcome: Outcome) -> None:
        self.counts[outcome] += 1

    def add_unmapped(self, count: int) -> None:
        self.unmapped_fields += count

    def finish(self, files: int = 1, end_time: datetime | None = None) -> ImportResult:
        end = end_time or datetime.now(UTC)
        elapsed = (end - self.start_time).total_seconds()
        rows = self.rows
        return ImportResult(
            files=files,
            rows=rows,
            inserted=self.counts[Outcome.INSERTED],
            updated=self.counts[Outcome.UPDATED],
            invalid=self.counts[Outcome.INVALID],
            yielded=self.counts[Outcome.YIELDED],
            unmapped_fields=self.unmapped_fields,
            start_time=self.start_time,
            end_time=end,
            elapsed_seconds=elapsed,
            throughput_rows_per_sec=(rows / elapsed) if elapsed > 0 else 0.0,
        )
