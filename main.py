"""
main.py

What this file does:
- Runs the vocabulary-enrichment pipeline once with the project's default layout.

How to run:
- From project root:
  PYTHONPATH=src python main.py
- For other layouts / knobs use scripts/enrich_unknown_chunks.py.
"""

from __future__ import annotations

from zh_vocab_coverage.config import PipelineConfig
from zh_vocab_coverage.pipeline.pipeline import run_pipeline
from zh_vocab_coverage.utils.log import setup_logging

if __name__ == "__main__":
    setup_logging(log_dir="data/interim")
    cfg = PipelineConfig(
        cedict_path="data/raw/cedict_ts.u8",
        corpus_tsv=(
            "data/processed/sentences_tatoeba.simplified.tsv",
            "data/custom/sentences_custom.tsv",
        ),
        db_path="data/vocab.db",
        hsk_json="vendor/complete-hsk-vocabulary/complete.min.json",
        entry_json=(
            "data/interim/words_additional.json",
            "data/custom/custom_words.json",
        ),
        out_dir="data/interim",
        workers=4,
    )
    state = run_pipeline(cfg)
    print(f"✅ Pipeline {state.status.value}: {len(state.cumulative_enriched)} entries -> data/interim")
