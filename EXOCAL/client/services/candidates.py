from __future__ import annotations

import io
from typing import Any

import pandas as pd

from EXOCAL.client.common.constants import (
    CANDIDATE_NUMERIC_COLUMNS,
    CANDIDATE_NUMERIC_FALLBACK,
)


# -----------------------------------------------------------------------------
def coerce_numeric_column(series: pd.Series) -> pd.Series:
    """Malformed or empty numeric values become CANDIDATE_NUMERIC_FALLBACK."""
    converted = pd.to_numeric(series, errors="coerce")
    return converted.fillna(CANDIDATE_NUMERIC_FALLBACK).astype(float)


# -----------------------------------------------------------------------------
def parse_candidates_csv(
    text: str, numeric_columns: tuple[str, ...] = CANDIDATE_NUMERIC_COLUMNS
) -> list[dict[str, Any]]:
    cleaned = text.strip()
    lines = cleaned.splitlines()
    if len(lines) < 2:
        return []

    width = len(lines[0].split(","))
    frame = pd.read_csv(
        io.StringIO(cleaned),
        dtype=str,
        keep_default_na=False,
        index_col=False,
        engine="python",
        on_bad_lines=lambda fields: fields[:width],
    )
    if frame.empty:
        return []

    frame.columns = [str(column).strip() for column in frame.columns]
    frame = frame.fillna("").apply(lambda column: column.astype(str).str.strip())
    for column in numeric_columns:
        if column in frame.columns:
            frame[column] = coerce_numeric_column(frame[column])

    return frame.to_dict(orient="records")
