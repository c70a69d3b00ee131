#!/usr/bin/env python3
"""
scripts/build_vocab_db.py

Build (or refresh) the project SQLite database the coverage engine reads.

Loads, in order:
  - complete-hsk-vocabulary JSON            -> words_hsk
  - enriched-entry JSON artifacts (0..n)    -> words_additional
  - corpus TSV files (id, zh[, en])         -> sentences
  - optionally one learner bank from a CSV  -> user_banks + user_bank_words

All word writes are upserts by simplified_zh, so the script can be re-run after
reviewing new artifacts.

Usage:
  PYTHONPATH=src python scripts/build_vocab_db.py \
    --db data/vocab.db \
    --hsk-json vendor/complete-hsk-vocabulary/complete.min.json \
    --entry-json data/interim/words_additional.json data/interim/words_corpus_cedict.json \
    --sentences data/processed/sentences_tatoeba.simplified.tsv \
    --bank-csv data/my_words.csv --bank-column word --user-id 1
"""

from __future__ import annotations

import argparse
from pathlib import Path

from zh_vocab_coverage.corpus.sources import TsvCorpus
from zh_vocab_coverage.store.db import (
    connect,
    create_bank,
    init_db,
    insert_sentences,
    meta_put,
    upsert_words,
    word_counts,
)
from zh_vocab_coverage.utils.io import read_csv_column
from zh_vocab_coverage.utils.log import setup_logging
from zh_vocab_coverage.vocab.sources import load_entry_json, load_hsk_json


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--db", required=True, help="SQLite DB path (created if missing)")
    ap.add_argument("--hsk-json", default=None, help="complete-hsk-vocabulary JSON")
    ap.add_argument("--entry-json", nargs="*", default=[], help="Enriched entry JSON files")
    ap.add_argument("--sentences", nargs="*", default=[], help="Corpus TSV files")
    ap.add_argument("--sentence-source", default="tatoeba")
    ap.add_argument("--bank-csv", default=None, help="CSV with a learner's known words")
    ap.add_argument("--bank-column", default="word")
    ap.add_argument("--bank-name", default="default")
    ap.add_argument("--user-id", type=int, default=1)
    args = ap.parse_args()

    setup_logging()

    db_path = Path(args.db)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = connect(db_path)
    try:
        init_db(conn)

        if args.hsk_json:
            hsk = load_hsk_json(args.hsk_json)
            n = upsert_words(conn, hsk.entries(), table="words_hsk")
            meta_put(conn, "hsk_json", args.hsk_json)
            print(f"   words_hsk: {n} upserted")

        if args.entry_json:
            extra = load_entry_json(args.entry_json, skip_missing=False)
            n = upsert_words(conn, extra.entries(), table="words_additional")
            print(f"   words_additional: {n} upserted")

        if args.sentences:
            n = insert_sentences(conn, TsvCorpus(args.sentences), source=args.sentence_source)
            print(f"   sentences: {n} inserted")

        if args.bank_csv:
            words = read_csv_column(args.bank_csv, args.bank_column)
            bank_id = create_bank(conn, args.user_id, args.bank_name, words)
            print(f"   bank {bank_id} for user {args.user_id}: {len(words)} words")

        conn.commit()
        counts = word_counts(conn)
    finally:
        conn.close()

    print(f"✅ Built DB: {db_path}")
    for k, v in counts.items():
        print(f"   {k}: {v}")


if __name__ == "__main__":
    main()
