"""Loading numeric matrices from delimited text files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import numpy as np

_FLOAT32_MAX = float(np.finfo(np.float32).max)

_NUMBER_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _parse_token(token: str) -> float | None:
    """Parse the leading number of a token, or None if there is none."""
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        return None
    value = float(match.group(1))
    if np.isfinite(value) and abs(value) > _FLOAT32_MAX:
        return None
    return value


def _leading_lines(lines: Iterable[str]) -> list[str]:
    collected = []
    for line in lines:
        line = line.rstrip("\n")
        if not line:
            break
        collected.append(line)
    return collected


def csv_matrix_size(lines: Iterable[str], split_char: str = ",") -> tuple[int, int]:
    """Count rows up to the first empty line and the widest row's columns."""
    rows = _leading_lines(lines)
    cols = max((len(line.split(split_char)) for line in rows), default=0)
    return len(rows), cols


def load_csv(file_path: str | Path, split_char: str = ",") -> np.ndarray:
    """Read a delimited file into a float32 matrix.

    Reading stops at the first empty line. Short rows are padded with zeros
    and tokens that do not start with a number are left as zero.
    """
    if not str(file_path):
        raise ValueError("CSV file path is empty")
    with open(file_path, encoding="utf-8") as handle:
        rows = _leading_lines(handle)

    n_rows, n_cols = csv_matrix_size(rows, split_char)
    data = np.zeros((n_rows, n_cols), dtype=np.float32)
    for row, line in enumerate(rows):
        for col, token in enumerate(line.split(split_char)):
            value = _parse_token(token)
            if value is not None:
                data[row, col] = value
    return data