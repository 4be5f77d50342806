from __future__ import annotations

from ..models.import_result import ImportResult

"""SUMMARY line rendering."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(total_files: int, result: ImportResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY files={n}/{total} rows={rows} inserted={i} updated={u} invalid={x}
    yielded={y} unmapped={m} elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     files=1, rows=10, inserted=6, updated=3, invalid=1, yielded=0,
        ...     unmapped_fields=2, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=5.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 rows=10 inserted=6 updated=3 invalid=1 yielded=0 unmapped=2 elapsed_sec=2 throughput_rps=5'
    """
    return (
        f"SUMMARY files={result.files}/{total_files} "
        f"rows={result.rows} "
        f"inserted={result.inserted} "
        f"updated={result.updated} "
        f"invalid={result.invalid} "
        f"yielded={result.yielded} "
        f"unmapped={result.unmapped_fields} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
