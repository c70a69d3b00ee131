"""
store/db.py

What this file does:
- Defines the SQLite schema for the project database.
- Provides connect() / init_db() plus the few read/write helpers the core needs:
  - upsert_words(): merge enriched vocabulary into words_hsk / words_additional
  - load_known_words(): the global known-word set (both word tables)
  - load_user_vocabulary(): one learner's known-word set (all of their banks)
  - insert_sentences(): seed the sentences table from a corpus source
  - meta_put() / record_run(): provenance, as in the bootstrap runs

How it fits:
- The engine itself never touches SQLite; the pipeline and scripts read from here
  once before a pass and write artifacts back after it.

Notes:
- upsert_words() is idempotent by simplified_zh, so re-running a pipeline after a
  forced stop never duplicates vocabulary.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..corpus.sources import CorpusRow
from ..vocab.entry import VocabularyEntry, VocabularySet

SCHEMA_VERSION = 1

WORD_TABLES = ("words_hsk", "words_additional")

DDL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS meta (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS words_hsk (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  simplified_zh TEXT NOT NULL UNIQUE,
  traditional_zh TEXT,
  pinyin_numeric TEXT,
  pinyin TEXT,
  definitions_json TEXT NOT NULL DEFAULT '[]',
  hsk_level TEXT,
  source TEXT
);

CREATE TABLE IF NOT EXISTS words_additional (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  simplified_zh TEXT NOT NULL UNIQUE,
  traditional_zh TEXT,
  pinyin_numeric TEXT,
  pinyin TEXT,
  definitions_json TEXT NOT NULL DEFAULT '[]',
  hsk_level TEXT,
  frequency_in_corpus INTEGER,
  source TEXT
);

CREATE TABLE IF NOT EXISTS sentences (
  id INTEGER PRIMARY KEY,
  zh TEXT NOT NULL,
  en TEXT NOT NULL DEFAULT '',
  source TEXT NOT NULL DEFAULT 'tatoeba'
);

CREATE TABLE IF NOT EXISTS user_banks (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id INTEGER NOT NULL,
  name TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_user_banks_user ON user_banks(user_id);

CREATE TABLE IF NOT EXISTS user_bank_words (
  bank_id INTEGER NOT NULL REFERENCES user_banks(id),
  simplified_zh TEXT NOT NULL,
  PRIMARY KEY (bank_id, simplified_zh)
);

CREATE TABLE IF NOT EXISTS runs (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  kind TEXT NOT NULL,
  created_at TEXT NOT NULL,
  config_hash TEXT,
  status TEXT,
  notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_runs_kind ON runs(kind);
"""


def connect(db_path: str | Path) -> sqlite3.Connection:
  conn = sqlite3.connect(str(db_path))
  conn.row_factory = sqlite3.Row
  return conn


def init_db(conn: sqlite3.Connection) -> None:
  conn.executescript(DDL)
  meta_put(conn, "schema_version", SCHEMA_VERSION)
  conn.commit()


def meta_put(conn: sqlite3.Connection, key: str, value: object) -> None:
  conn.execute(
    "INSERT OR REPLACE INTO meta(key, value) VALUES(?, ?)",
    (key, str(value)),
  )


def record_run(
  conn: sqlite3.Connection,
  kind: str,
  config_hash: Optional[str] = None,
  status: Optional[str] = None,
  notes: Optional[str] = None,
) -> int:
  cur = conn.execute(
    "INSERT INTO runs(kind, created_at, config_hash, status, notes) VALUES(?,?,?,?,?)",
    (kind, datetime.now(timezone.utc).isoformat(), config_hash, status, notes),
  )
  conn.commit()
  return int(cur.lastrowid)


def upsert_words(
  conn: sqlite3.Connection,
  entries: Iterable[VocabularyEntry],
  table: str = "words_additional",
) -> int:
  if table not in WORD_TABLES:
    raise ValueError(f"unknown word table: {table}")

  n = 0
  for e in entries:
    params = {
      "simplified_zh": e.simplified,
      "traditional_zh": e.traditional,
      "pinyin_numeric": e.pinyin_numeric,
      "pinyin": e.pinyin_display,
      "definitions_json": json.dumps(list(e.definitions), ensure_ascii=False),
      "hsk_level": e.hsk_level,
      "source": e.origin_tag,
    }
    if table == "words_additional":
      params["frequency_in_corpus"] = e.frequency

    cols = ", ".join(params)
    qmarks = ", ".join("?" for _ in params)
    updates = ", ".join(f"{c}=excluded.{c}" for c in params if c != "simplified_zh")
    conn.execute(
      f"""
      INSERT INTO {table}({cols}) VALUES({qmarks})
      ON CONFLICT(simplified_zh) DO UPDATE SET {updates}
      """,
      tuple(params.values()),
    )
    n += 1
  conn.commit()
  return n


def load_known_words(conn: sqlite3.Connection) -> set[str]:
  known: set[str] = set()
  for table in WORD_TABLES:
    for r in conn.execute(f"SELECT simplified_zh FROM {table}"):
      known.add(r[0])
  return known


def load_user_vocabulary(conn: sqlite3.Connection, user_id: int) -> VocabularySet:
  rows = conn.execute(
    """
    SELECT DISTINCT ubw.simplified_zh
    FROM user_bank_words AS ubw
    JOIN user_banks AS ub ON ubw.bank_id = ub.id
    WHERE ub.user_id = ?
    """,
    (user_id,),
  ).fetchall()
  return VocabularySet.from_words(r[0] for r in rows)


def create_bank(conn: sqlite3.Connection, user_id: int, name: str, words: Iterable[str]) -> int:
  cur = conn.execute("INSERT INTO user_banks(user_id, name) VALUES(?, ?)", (user_id, name))
  bank_id = int(cur.lastrowid)
  conn.executemany(
    "INSERT OR IGNORE INTO user_bank_words(bank_id, simplified_zh) VALUES(?, ?)",
    [(bank_id, w) for w in words],
  )
  conn.commit()
  return bank_id


def insert_sentences(conn: sqlite3.Connection, rows: Iterable[CorpusRow], source: str = "tatoeba") -> int:
  n = 0
  for r in rows:
    if isinstance(r.id, int):
      conn.execute(
        "INSERT OR REPLACE INTO sentences(id, zh, en, source) VALUES(?,?,?,?)",
        (r.id, r.zh, r.en, source),
      )
    else:
      conn.execute(
        "INSERT INTO sentences(zh, en, source) VALUES(?,?,?)",
        (r.zh, r.en, source),
      )
    n += 1
  conn.commit()
  return n


def word_counts(conn: sqlite3.Connection) -> Dict[str, int]:
  out: Dict[str, int] = {}
  for table in WORD_TABLES:
    out[table] = int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
  out["sentences"] = int(conn.execute("SELECT COUNT(*) FROM sentences").fetchone()[0])
  return out


def source_counts(conn: sqlite3.Connection, table: str = "words_additional") -> Dict[str, int]:
  if table not in WORD_TABLES:
    raise ValueError(f"unknown word table: {table}")
  rows = conn.execute(
    f"SELECT COALESCE(source, ''), COUNT(*) FROM {table} GROUP BY 1 ORDER BY 2 DESC"
  ).fetchall()
  return {r[0]: int(r[1]) for r in rows}
