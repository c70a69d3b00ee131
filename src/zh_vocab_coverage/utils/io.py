"""
utils/io.py

What this file does:
- Small readers/writers for the artifacts exchanged with manual review:
  - read_csv_column(): one column of a CSV as a list of strings
  - read_level_columns(): "missing HSK words" CSV (one column per HSK band)
  - read_json() / write_json(): JSON arrays of vocabulary rows
  - write_tsv() / read_tsv(): tab-separated reports via pandas

How it fits:
- This is the only place where artifact file formats matter; the engine works on
  Python objects and never parses files itself.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from ..errors import SourceUnavailable

HSK_BAND_HEADERS = ("1-3", "4", "5", "6")


def read_csv_column(path: str | Path, column: str) -> list[str]:
    path = Path(path)
    if not path.exists():
        raise SourceUnavailable("word list", path, "file not found")
    out: list[str] = []
    with path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header row (no fieldnames).")
        if column not in reader.fieldnames:
            raise ValueError(f"Column '{column}' not found. Available: {reader.fieldnames}")
        for row in reader:
            txt = (row.get(column) or "").strip()
            if txt:
                out.append(txt)
    return out


def read_level_columns(path: str | Path, headers: Sequence[str] = HSK_BAND_HEADERS) -> Dict[str, str]:
    """
    Header row, then rows of words where column i belongs to band headers[i].
    Returns word -> band (later occurrences win, as in the source list).
    """
    path = Path(path)
    if not path.exists():
        raise SourceUnavailable("word list", path, "file not found")
    out: Dict[str, str] = {}
    with path.open("r", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for cols in reader:
            for idx, word in enumerate(cols[: len(headers)]):
                word = word.strip()
                if word:
                    out[word] = headers[idx]
    return out


def read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_json(path: str | Path, payload: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path


def write_tsv(path: str | Path, rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(rows), columns=list(columns))
    df.to_csv(path, sep="\t", index=False, encoding="utf-8", quoting=csv.QUOTE_NONE, escapechar="\\")
    return path


def read_tsv(path: str | Path) -> List[Dict[str, str]]:
    path = Path(path)
    if not path.exists():
        raise SourceUnavailable("report", path, "file not found")
    df = pd.read_csv(
        path,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        escapechar="\\",
        encoding="utf-8",
    )
    return df.to_dict(orient="records")
