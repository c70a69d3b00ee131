#!/usr/bin/env python3
"""
scripts/find_unknown_chunks.py

One aggregation pass (no dictionary lookup): which parts of the corpus are not
covered by the known vocabulary, ranked by the number of sentences they occur in.

Output TSV columns: chunk, count, example_ids (first N sentence ids, comma-joined)

Usage:
  PYTHONPATH=src python scripts/find_unknown_chunks.py \
    --corpus data/processed/sentences_tatoeba.simplified.tsv data/custom/sentences_custom.tsv \
    --hsk-json vendor/complete-hsk-vocabulary/complete.min.json \
    --entry-json data/interim/words_additional.json \
    --out misc/unknown_chunks.tsv
"""

from __future__ import annotations

import argparse

from zh_vocab_coverage.corpus.sources import SqliteCorpus, TsvCorpus
from zh_vocab_coverage.coverage.aggregate import aggregate_unknowns, report_rows
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
  ap.add_argument("--out", default="misc/unknown_chunks.tsv")
  ap.add_argument("--workers", type=int, default=1)
  ap.add_argument("--max-piece-length", type=int, default=6)
  ap.add_argument("--example-ids", type=int, default=5)
  ap.add_argument("--top", type=int, default=20, help="Print the N most frequent chunks")
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

  corpus = TsvCorpus(args.corpus) if args.corpus else SqliteCorpus(args.db)
  corpus.validate()

  report = aggregate_unknowns(
    corpus,
    known,
    JiebaSegmenter(),
    workers=args.workers,
    max_piece_length=args.max_piece_length,
  )

  write_tsv(args.out, report_rows(report.records, args.example_ids), ("chunk", "count", "example_ids"))

  print(f"✅ {report.unknown_count} unknown chunks from {report.sentences_used} sentences -> {args.out}")
  print(f"   skipped: ascii={report.skipped_ascii} malformed={report.skipped_malformed} mismatched={report.mismatched}")
  for r in report.records[: args.top]:
    print(f"   {r.chunk}\t{r.frequency}")


if __name__ == "__main__":
  main()
