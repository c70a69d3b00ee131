#!/usr/bin/env python3
"""
scripts/enrich_word_list.py

Look up a plain word list in CC-CEDICT and write vocabulary entries for review.

Two input shapes:
  - band CSV (default): header "1-3,4,5,6", each column lists words of that HSK band
    (e.g. the Hacking Chinese "missing HSK words" list)
  - --column NAME: one word per row in column NAME (custom word lists)

Words already in the known vocabulary are skipped.

Usage:
  PYTHONPATH=src python scripts/enrich_word_list.py \
    --cedict data/raw/cedict_ts.u8 \
    --words data/raw/hacking-chinese_missing-hsk-words.csv \
    --hsk-json vendor/complete-hsk-vocabulary/complete.min.json \
    --origin hacking-chinese-missing \
    --out-dir data/interim
"""

from __future__ import annotations

import argparse

from zh_vocab_coverage.dictionary.cedict import CedictDictionary
from zh_vocab_coverage.pipeline.pipeline import enrich_word_file
from zh_vocab_coverage.store.db import connect
from zh_vocab_coverage.utils.log import setup_logging
from zh_vocab_coverage.vocab.sources import load_vocabulary


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--cedict", required=True)
    ap.add_argument("--words", required=True, help="CSV word list")
    ap.add_argument("--column", default=None, help="Single word column (omit for HSK band columns)")
    ap.add_argument("--origin", default="custom", help="Source tag stored on each entry")
    ap.add_argument("--stem", default="words_additional", help="Output file stem")
    ap.add_argument("--db", default=None)
    ap.add_argument("--hsk-json", default=None)
    ap.add_argument("--entry-json", nargs="*", default=[])
    ap.add_argument("--out-dir", default="data/interim")
    args = ap.parse_args()

    setup_logging()

    dictionary = CedictDictionary.load(args.cedict)
    conn = connect(args.db) if args.db else None
    try:
        known = load_vocabulary(hsk_json=args.hsk_json, entry_json=args.entry_json, db_conn=conn)
    finally:
        if conn is not None:
            conn.close()

    res = enrich_word_file(
        args.words,
        dictionary,
        known,
        args.out_dir,
        origin_tag=args.origin,
        column=args.column,
        stem=args.stem,
    )
    print(f"✅ {len(res.resolved)} words -> {args.out_dir}/{args.stem}.json")
    if res.skipped_known:
        print(f"   {res.skipped_known} already known (skipped)")
    if res.unresolved:
        print(f"   {len(res.unresolved)} not found -> {args.out_dir}/{args.stem}.notfound.json")


if __name__ == "__main__":
    main()
