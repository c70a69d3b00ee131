#!/usr/bin/env python3
"""
scripts/find_quiz_sentences.py

Find sentences a learner can mostly read: coverage within [--min, --max] against
the words in all of the learner's banks.

Output TSV columns:
  zh_id, coverage, total_segments, known_segments, unknown_segments, zh, en

Usage:
  PYTHONPATH=src python scripts/find_quiz_sentences.py --db data/vocab.db --user-id 1 --limit 100
"""

from __future__ import annotations

import argparse

from zh_vocab_coverage.corpus.sources import SqliteCorpus, TsvCorpus
from zh_vocab_coverage.coverage.score import QUIZ_COLUMNS, quiz_rows, select_quiz_sentences
from zh_vocab_coverage.store.db import connect, load_user_vocabulary
from zh_vocab_coverage.text.segment import JiebaSegmenter
from zh_vocab_coverage.utils.io import write_tsv
from zh_vocab_coverage.utils.log import setup_logging


def main() -> None:
  ap = argparse.ArgumentParser()
  ap.add_argument("--db", required=True)
  ap.add_argument("--user-id", type=int, default=1)
  ap.add_argument("--corpus", nargs="*", default=[], help="Corpus TSV files (default: sentences table)")
  ap.add_argument("--min", dest="min_coverage", type=float, default=0.80)
  ap.add_argument("--max", dest="max_coverage", type=float, default=0.95)
  ap.add_argument("--limit", type=int, default=None)
  ap.add_argument("--out", default="misc/quiz_sentences.tsv")
  ap.add_argument("--show", type=int, default=10)
  args = ap.parse_args()

  setup_logging()

  conn = connect(args.db)
  try:
    learner = load_user_vocabulary(conn, args.user_id)
  finally:
    conn.close()
  print(f"User {args.user_id} knows {len(learner)} words (all banks)")

  corpus = TsvCorpus(args.corpus) if args.corpus else SqliteCorpus(args.db)
  corpus.validate()

  found = select_quiz_sentences(
    corpus,
    learner,
    JiebaSegmenter(),
    min_coverage=args.min_coverage,
    max_coverage=args.max_coverage,
    limit=args.limit,
  )

  for c in found[: args.show]:
    cov = c.coverage
    print(f"[#{c.sentence_id}] coverage {cov.score * 100:.1f}%  {cov.known_segments}/{cov.total_segments}")
    print(f"  ZH: {c.zh}")
    print(f"  EN: {c.en}")
    if cov.unknown_segments:
      print(f"  Unknown: {', '.join(cov.unknown_segments)}")

  write_tsv(args.out, quiz_rows(found), QUIZ_COLUMNS)
  print(f"✅ {len(found)} quiz sentences -> {args.out}")


if __name__ == "__main__":
  main()
