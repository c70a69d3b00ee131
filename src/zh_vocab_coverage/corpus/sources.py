"""
corpus/sources.py

What this file does:
- Defines CorpusRow (id, zh, en) and the two corpus sources used by the pipeline:
  1) TsvCorpus: one or more "id<TAB>zh[<TAB>en]" files with a header row
  2) SqliteCorpus: a sentences table in the project SQLite DB
- simplify_rows(): OpenCC t2s normalization for corpora that may contain
  traditional characters (the vocabulary is simplified-only).

How it fits:
- The convergence controller re-enumerates the corpus once per round, so both
  sources are re-iterable: every iteration re-reads from disk.
- Missing files / tables raise SourceUnavailable (fatal, before processing).
- Malformed rows are skipped; the count of the last pass is in `skipped_malformed`.
"""

from __future__ import annotations

import csv
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from opencc import OpenCC

from ..errors import MalformedRecord, SourceUnavailable

logger = logging.getLogger(__name__)

SentenceId = Union[int, str]


@dataclass(frozen=True)
class CorpusRow:
    id: SentenceId
    zh: str
    en: str = ""


def _parse_id(raw: str) -> SentenceId:
    raw = raw.strip()
    return int(raw) if raw.isdigit() else raw


def parse_tsv_row(cols: Sequence[str], line_no: Optional[int] = None) -> Optional[CorpusRow]:
    """
    Returns None for rows with an empty Chinese column.
    Raises MalformedRecord for rows with fewer than two columns or an empty id.
    """
    if len(cols) < 2 or not cols[0].strip():
        raise MalformedRecord("corpus", line_no, "\t".join(cols))
    zh = cols[1].strip()
    if not zh:
        return None
    en = cols[2].strip() if len(cols) >= 3 else ""
    return CorpusRow(id=_parse_id(cols[0]), zh=zh, en=en)


class TsvCorpus:
    def __init__(self, paths: Iterable[str | Path], skip_missing: bool = False) -> None:
        self.paths: List[Path] = [Path(p) for p in paths]
        self.skip_missing = skip_missing
        self.skipped_malformed = 0

    def validate(self) -> None:
        if not self.paths:
            raise SourceUnavailable("corpus", None, "no corpus paths configured")
        missing = [p for p in self.paths if not p.exists()]
        if missing and not self.skip_missing:
            raise SourceUnavailable("corpus", missing[0], "file not found")
        if len(missing) == len(self.paths):
            raise SourceUnavailable("corpus", missing[0], "none of the corpus files exist")

    def __iter__(self) -> Iterator[CorpusRow]:
        self.validate()
        self.skipped_malformed = 0
        for path in self.paths:
            if not path.exists():
                logger.warning("corpus file missing, skipped: %s", path)
                continue
            try:
                f = path.open("r", encoding="utf-8", newline="")
            except OSError as exc:
                raise SourceUnavailable("corpus", path, str(exc)) from exc
            with f:
                # same dialect as utils.io.write_tsv, which backslash-escapes quotes
                reader = csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE, escapechar="\\")
                next(reader, None)  # header
                for line_no, cols in enumerate(reader, start=2):
                    if not cols:
                        continue
                    try:
                        row = parse_tsv_row(cols, line_no)
                    except MalformedRecord as exc:
                        self.skipped_malformed += 1
                        logger.debug("%s: %s", path, exc)
                        continue
                    if row is not None:
                        yield row
        if self.skipped_malformed:
            logger.warning("corpus: skipped %d malformed rows", self.skipped_malformed)


class SqliteCorpus:
    def __init__(self, db_path: str | Path, table: str = "sentences") -> None:
        self.db_path = Path(db_path)
        self.table = table
        self.skipped_malformed = 0

    def validate(self) -> None:
        if not self.db_path.exists():
            raise SourceUnavailable("corpus", self.db_path, "database not found")
        conn = sqlite3.connect(str(self.db_path))
        try:
            found = conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?", (self.table,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise SourceUnavailable("corpus", self.db_path, str(exc)) from exc
        finally:
            conn.close()
        if found is None:
            raise SourceUnavailable("corpus", self.db_path, f"table {self.table} not found")

    def __iter__(self) -> Iterator[CorpusRow]:
        self.validate()
        self.skipped_malformed = 0
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            try:
                rows = conn.execute(f"SELECT id, zh, en FROM {self.table}").fetchall()
            except sqlite3.Error as exc:
                raise SourceUnavailable("corpus", self.db_path, f"table {self.table}: {exc}") from exc
        finally:
            conn.close()

        for r in rows:
            zh = r["zh"]
            if not isinstance(zh, str):
                self.skipped_malformed += 1
                logger.debug("corpus row %s has non-text zh: %r", r["id"], zh)
                continue
            if not zh.strip():
                continue
            yield CorpusRow(id=r["id"], zh=zh.strip(), en=r["en"] or "")
        if self.skipped_malformed:
            logger.warning("corpus: skipped %d malformed rows", self.skipped_malformed)


def simplify_rows(rows: Iterable[CorpusRow], cc_t2s: Optional[OpenCC] = None) -> Iterator[CorpusRow]:
    cc_t2s = cc_t2s or OpenCC("t2s")
    for row in rows:
        zh = cc_t2s.convert(row.zh)
        yield row if zh == row.zh else CorpusRow(id=row.id, zh=zh, en=row.en)
