from __future__ import annotations

from itertools import islice
from pathlib import Path

import pandas as pd

from ..models.config_models import DEFAULT_LINE_BREAK
from .scanner import read_dump_file

"""Tabular preview of the first rows of a dump (``--inspect-data``)."""


def preview_frame(
    path: Path,
    prefix: str = "",
    line_break: str = DEFAULT_LINE_BREAK,
    encoding: str = "utf-8",
    limit: int = 3,
) -> pd.DataFrame:
    """First ``limit`` rows as a DataFrame; columns follow first-seen order.

    Columns missing from a row are NaN in the frame.
    """
    rows = read_dump_file(path, prefix, line_break, encoding)
    try:
        sample = list(islice(rows, limit))
    finally:
        rows.close()
    frame = pd.DataFrame([r.fields for r in sample])
    frame.index = pd.Index([r.row_number for r in sample], name="row")
    return frame
