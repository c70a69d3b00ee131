#!/usr/bin/env python3
"""
scripts/enrich_unknown_chunks.py

Runs the full convergence loop:
  aggregate unknown chunks -> look them up in CC-CEDICT -> merge -> repeat
until the unknown count stops decreasing (or --max-iterations / budgets are hit).

Writes into --out-dir:
  - unknown_chunks.tsv
  - words_corpus_cedict.json   (review, then load with build_vocab_db.py --entry-json)
  - words_corpus_notfound.json (manual curation list)

--from-report skips the corpus pass and only resolves an existing unknown_chunks.tsv
(useful after hand-editing the report).

Usage:
  PYTHONPATH=src python scripts/enrich_unknown_chunks.py \
    --cedict data/raw/cedict_ts.u8 \
    --db data/vocab.db \
    --corpus data/processed/sentences_tatoeba.simplified.tsv \
    --out-dir data/interim \
    --workers 4
"""

from __future__ import annotations

import argparse

from zh_vocab_coverage.config import PipelineConfig
from zh_vocab_coverage.dictionary.cedict import CedictDictionary
from zh_vocab_coverage.pipeline.pipeline import enrich_chunk_report, run_pipeline
from zh_vocab_coverage.store.db import connect
from zh_vocab_coverage.utils.log import setup_logging
from zh_vocab_coverage.vocab.sources import load_vocabulary


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--cedict", required=True, help="CC-CEDICT file (cedict_ts.u8)")
    ap.add_argument("--db", default=None, help="Project DB (vocabulary; sentences if no --corpus)")
    ap.add_argument("--corpus", nargs="*", default=[], help="Corpus TSV files")
    ap.add_argument("--hsk-json", default=None)
    ap.add_argument("--entry-json", nargs="*", default=[])
    ap.add_argument("--out-dir", default="data/interim")
    ap.add_argument("--simplify", action="store_true", help="OpenCC t2s the corpus before segmenting")
    ap.add_argument("--write-db", action="store_true", help="Upsert merged entries into words_additional")

    ap.add_argument("--max-iterations", type=int, default=5)
    ap.add_argument("--max-piece-length", type=int, default=6)
    ap.add_argument("--min-frequency", type=int, default=1)
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--batch-size", type=int, default=500)
    ap.add_argument("--time-budget", type=float, default=None, help="Seconds")
    ap.add_argument("--row-budget", type=int, default=None, help="Max rows per pass")
    ap.add_argument("--example-ids", type=int, default=5)

    ap.add_argument("--from-report", default=None, help="Resolve an existing unknown_chunks.tsv instead")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging("DEBUG" if args.verbose else "INFO", log_dir=args.out_dir)

    if args.from_report:
        dictionary = CedictDictionary.load(args.cedict)
        conn = connect(args.db) if args.db else None
        try:
            known = load_vocabulary(hsk_json=args.hsk_json, entry_json=args.entry_json, db_conn=conn)
        finally:
            if conn is not None:
                conn.close()
        res = enrich_chunk_report(args.from_report, dictionary, known, args.out_dir, min_frequency=args.min_frequency)
        print(f"✅ {len(res.resolved)} resolved, {len(res.unresolved)} not in dictionary -> {args.out_dir}")
        return

    cfg = PipelineConfig(
        cedict_path=args.cedict,
        corpus_tsv=tuple(args.corpus),
        db_path=args.db,
        hsk_json=args.hsk_json,
        entry_json=tuple(args.entry_json),
        simplify_corpus=args.simplify,
        out_dir=args.out_dir,
        write_db=args.write_db,
        max_iterations=args.max_iterations,
        max_piece_length=args.max_piece_length,
        min_frequency=args.min_frequency,
        workers=args.workers,
        batch_size=args.batch_size,
        time_budget=args.time_budget,
        row_budget=args.row_budget,
        example_ids_limit=args.example_ids,
    )
    state = run_pipeline(cfg)

    print(f"✅ {state.status.value}: {state.iteration} iterations, {len(state.cumulative_enriched)} entries merged")
    print(f"   unknown chunks left: {state.unknown_count}, unresolved: {len(state.unresolved)}")
    for rnd in state.history:
        print(
            f"   pass {rnd.corpus_pass}: unknown={rnd.unknown_count} resolved={rnd.resolved} "
            f"unresolved={rnd.unresolved} vocab={rnd.vocabulary_size}"
        )
    if state.exhausted_reason:
        print(f"   stopped early: {state.exhausted_reason}")


if __name__ == "__main__":
    main()
