#!/usr/bin/env python3
"""
scripts/find_sentences_with_unknown.py

Per-sentence counterpart of find_unknown_chunks.py: lists every sentence that still
contains text outside the known vocabulary, with the unknown pieces it contains.

Output TSV columns: id, zh, en, unknown_chars (distinct unknown pieces, comma-joined)

Usage:
  PYTHONPATH=src python scripts/find_sentences_with_unknown.py \
    --db data/vocab.db \
    --corpus data/processed/sentences_tatoeba.simplified.tsv \
    --out misc/sentences_with_unknown.tsv
"""

from __future__ import annotations

import argparse

from zh_vocab_coverage.corpus.sources import SqliteCorpus, TsvCorpus
from zh_vocab_coverage.coverage.aggregate import SENTENCE_REPORT_COLUMNS, sentences_with_unknown
from zh_vocab_coverage.store.db import connect
from zh_vocab_coverage.text.segment import JiebaSegmenter
from zh_vocab_coverage.utils.io import write_tsv
from zh_vocab_coverage.utils.log import setup_logging
from zh_vocab_coverage.vocab.sources import load_vocabulary


def main() -> None:
  ap = argparse.ArgumentParser()
  ap.add_argument("--corpus", nargs="*", default=[], help="Corpus TSV files (id, zh[, en])")
  ap.add_argument("--db", default=None, help="Project DB (word tables; sentences if no --corpus)")
  ap.add_argument("--hsk-json", default=None)
  ap.add_argument("--entry-json", nargs="*", default=[])
  ap.add_argument("--out", default="misc/sentences_with_unknown.tsv")
  ap.add_argument("--max-piece-length", type=int, default=6)
  args = ap.parse_args()
  if not args.corpus and not args.db:
    ap.error("give --corpus or --db")

  setup_logging()

  conn = connect(args.db) if args.db else None
  try:
    known = load_vocabulary(hsk_json=args.hsk_json, entry_json=args.entry_json, db_conn=conn)
  finally:
    if conn is not None:
      conn.close()
  print(f"Loaded {len(known):,} known words")

  corpus = TsvCorpus(args.corpus) if args.corpus else SqliteCorpus(args.db)
  corpus.validate()

  rows = list(sentences_with_unknown(corpus, known, JiebaSegmenter(), max_piece_length=args.max_piece_length))
  write_tsv(args.out, rows, SENTENCE_REPORT_COLUMNS)
  print(f"✅ {len(rows):,} sentences with unknown words -> {args.out}")


if __name__ == "__main__":
  main()
