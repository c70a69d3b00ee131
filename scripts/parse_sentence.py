#!/usr/bin/env python3
"""
scripts/parse_sentence.py

Shows how a sentence is broken into display components against the known
vocabulary: punctuation, known words (with pinyin when the vocabulary has it) and
unknown runs.

Sentences come from the command line, or --random N picks N sentences from the
corpus (TSV files or the DB sentences table). Sentences with ASCII letters/digits
are skipped, as in the coverage passes.

Usage:
  PYTHONPATH=src python scripts/parse_sentence.py --db data/vocab.db "鲍勃也会开车。"
  PYTHONPATH=src python scripts/parse_sentence.py --db data/vocab.db --random 5 --json
"""

from __future__ import annotations

import argparse
import json
import random
from dataclasses import asdict

from zh_vocab_coverage.corpus.sources import SqliteCorpus, TsvCorpus
from zh_vocab_coverage.errors import ReconstructionMismatch
from zh_vocab_coverage.store.db import connect
from zh_vocab_coverage.text.classify import has_ascii
from zh_vocab_coverage.text.components import parse_components
from zh_vocab_coverage.text.segment import JiebaSegmenter
from zh_vocab_coverage.utils.log import setup_logging
from zh_vocab_coverage.vocab.sources import load_vocabulary


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("sentences", nargs="*")
    ap.add_argument("--db", default=None, help="Project DB (word tables; sentences for --random)")
    ap.add_argument("--hsk-json", default=None)
    ap.add_argument("--entry-json", nargs="*", default=[])
    ap.add_argument("--corpus", nargs="*", default=[], help="Corpus TSV files for --random")
    ap.add_argument("--random", type=int, default=0, help="Also parse N random corpus sentences")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--char-fallback", action="store_true", help="Split unknown segments per character")
    ap.add_argument("--quantity-fallback", action="store_true", help="Split number + measure word segments")
    ap.add_argument("--json", action="store_true", help="Print components as JSON")
    args = ap.parse_args()

    if not args.sentences and not args.random:
        ap.error("give sentences or --random N")
    if args.random and not (args.corpus or args.db):
        ap.error("--random needs --corpus or --db")

    setup_logging()

    conn = connect(args.db) if args.db else None
    try:
        vocab = load_vocabulary(hsk_json=args.hsk_json, entry_json=args.entry_json, db_conn=conn)
    finally:
        if conn is not None:
            conn.close()

    sentences = list(args.sentences)
    if args.random:
        corpus = TsvCorpus(args.corpus) if args.corpus else SqliteCorpus(args.db)
        corpus.validate()
        pool = [row.zh for row in corpus]
        rng = random.Random(args.seed)
        sentences += rng.sample(pool, min(args.random, len(pool)))

    segmenter = JiebaSegmenter()
    for sentence in sentences:
        if has_ascii(sentence):
            print(f"\nSkipping (has ASCII): {sentence}")
            continue
        try:
            comps = parse_components(
                sentence,
                vocab,
                segmenter,
                char_fallback=args.char_fallback,
                quantity_fallback=args.quantity_fallback,
                lookup=vocab,
            )
        except ReconstructionMismatch as exc:
            print(f"\n⚠️  {exc}")
            continue

        print(f"\nParsing: {sentence}")
        if args.json:
            print(json.dumps([asdict(c) for c in comps], ensure_ascii=False, indent=2))
            continue
        for c in comps:
            if c.punctuation:
                print(f"  {c.text!r:8} punctuation")
            elif c.known:
                print(f"  {c.text:8} known    {c.pinyin or ''}")
            else:
                print(f"  {c.text:8} UNKNOWN")


if __name__ == "__main__":
    main()
