"""
vocab/sources.py

What this file does:
- Loads vocabulary from every persisted shape the project uses and unions them:
  1) complete-hsk-vocabulary JSON (list of {"s"/"simplified", "forms": [...]})
  2) enriched-entry JSON artifacts (list of {"simplified_zh", ...})
  3) SQLite word tables (words_hsk, words_additional)

How it fits:
- The pipeline builds the initial VocabularySet from these sources once per run.
- A required source that is missing/unreadable raises SourceUnavailable.
- Entries without a traditional form get one from OpenCC s2t.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from opencc import OpenCC

from ..dictionary.pinyin import numeric_to_tone_marks
from ..errors import SourceUnavailable
from .entry import VocabularyEntry, VocabularySet

logger = logging.getLogger(__name__)

_cc_s2t: Optional[OpenCC] = None


def _to_traditional(simplified: str) -> str:
    global _cc_s2t
    if _cc_s2t is None:
        _cc_s2t = OpenCC("s2t")
    return _cc_s2t.convert(simplified)


def _read_json(path: Path, source: str) -> Any:
    if not path.exists():
        raise SourceUnavailable(source, path, "file not found")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SourceUnavailable(source, path, str(exc)) from exc


def _first_form(entry: Dict[str, Any]) -> Dict[str, Any]:
    forms = entry.get("forms") or entry.get("f") or []
    if isinstance(forms, list) and forms and isinstance(forms[0], dict):
        return forms[0]
    return {}


def hsk_entry_from_json(e: Dict[str, Any]) -> Optional[VocabularyEntry]:
    simp = str(e.get("s") or e.get("simplified") or "").strip()
    if not simp:
        return None

    form = _first_form(e)
    trans = form.get("transcriptions") or form.get("i") or {}
    if not isinstance(trans, dict):
        trans = {}
    numeric = str(trans.get("numeric") or trans.get("n") or "")
    display = str(trans.get("pinyin") or trans.get("y") or "") or numeric_to_tone_marks(numeric)
    meanings = form.get("meanings") or form.get("m") or []
    trad = str(form.get("traditional") or form.get("t") or "") or _to_traditional(simp)

    levels = e.get("level") or e.get("l") or []
    level = str(levels[0]) if isinstance(levels, list) and levels else None

    return VocabularyEntry(
        simplified=simp,
        traditional=trad,
        pinyin_numeric=numeric,
        pinyin_display=display,
        definitions=tuple(str(m) for m in meanings if str(m).strip()),
        origin_tag="hsk",
        hsk_level=level,
    )


def load_hsk_json(path: str | Path) -> VocabularySet:
    path = Path(path)
    data = _read_json(path, "vocabulary")
    if not isinstance(data, list):
        raise SourceUnavailable("vocabulary", path, "expected a JSON list of HSK entries")

    entries: List[VocabularyEntry] = []
    for e in data:
        if not isinstance(e, dict):
            continue
        entry = hsk_entry_from_json(e)
        if entry is not None:
            entries.append(entry)
    logger.info("loaded %d HSK words from %s", len(entries), path)
    return VocabularySet.from_entries(entries)


def load_entry_json(paths: Iterable[str | Path], skip_missing: bool = True) -> VocabularySet:
    """
    Enriched-entry artifacts. Missing files are skipped (and logged) unless
    skip_missing=False; unparseable files are always fatal.
    """
    entries: List[VocabularyEntry] = []
    for p in paths:
        path = Path(p)
        if not path.exists() and skip_missing:
            logger.warning("vocabulary file missing, skipped: %s", path)
            continue
        data = _read_json(path, "vocabulary")
        if not isinstance(data, list):
            raise SourceUnavailable("vocabulary", path, "expected a JSON list of entries")
        bad = 0
        for rec in data:
            if not isinstance(rec, dict):
                bad += 1
                continue
            try:
                entry = VocabularyEntry.from_record(rec, origin_tag=path.stem)
            except ValueError:
                bad += 1
                continue
            if not entry.traditional:
                entry = replace(entry, traditional=_to_traditional(entry.simplified))
            if not entry.pinyin_display and entry.pinyin_numeric:
                entry = replace(entry, pinyin_display=numeric_to_tone_marks(entry.pinyin_numeric))
            entries.append(entry)
        if bad:
            logger.warning("%s: skipped %d malformed entries", path, bad)
    return VocabularySet.from_entries(entries)


def load_sqlite_vocabulary(
    conn: sqlite3.Connection,
    tables: Sequence[str] = ("words_hsk", "words_additional"),
) -> VocabularySet:
    sets: List[VocabularySet] = []
    for table in tables:
        try:
            rows = conn.execute(
                f"""
                SELECT simplified_zh, traditional_zh, pinyin_numeric, pinyin, definitions_json, source
                FROM {table}
                """
            ).fetchall()
        except sqlite3.Error as exc:
            raise SourceUnavailable("vocabulary", None, f"table {table}: {exc}") from exc

        entries: List[VocabularyEntry] = []
        for r in rows:
            simp = (r[0] or "").strip()
            if not simp:
                continue
            try:
                defs = json.loads(r[4]) if r[4] else []
            except json.JSONDecodeError:
                defs = [r[4]]
            entries.append(
                VocabularyEntry(
                    simplified=simp,
                    traditional=r[1] or "",
                    pinyin_numeric=r[2] or "",
                    pinyin_display=r[3] or "",
                    definitions=tuple(str(d) for d in defs),
                    origin_tag=r[5] or table,
                )
            )
        sets.append(VocabularySet.from_entries(entries))
    return VocabularySet.union(*sets)


def load_vocabulary(
    hsk_json: Optional[str | Path] = None,
    entry_json: Sequence[str | Path] = (),
    db_conn: Optional[sqlite3.Connection] = None,
    db_tables: Sequence[str] = ("words_hsk", "words_additional"),
) -> VocabularySet:
    sets: List[VocabularySet] = []
    if hsk_json is not None:
        sets.append(load_hsk_json(hsk_json))
    if entry_json:
        sets.append(load_entry_json(entry_json))
    if db_conn is not None:
        sets.append(load_sqlite_vocabulary(db_conn, db_tables))
    if not sets:
        raise SourceUnavailable("vocabulary", None, "no vocabulary sources configured")
    vocab = VocabularySet.union(*sets)
    logger.info("known vocabulary: %d words", len(vocab))
    return vocab
