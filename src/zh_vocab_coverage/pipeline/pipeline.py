"""
pipeline/pipeline.py

Orchestrates one vocabulary-enrichment run:
  1) Load + validate every source (dictionary, corpus, vocabulary); any failure is
     fatal before the first pass
  2) Run the convergence controller over the corpus
  3) Write review artifacts into out_dir:
       - unknown_chunks.tsv         chunk / count / example_ids of the final pass
       - words_corpus_cedict.json   every entry merged during the run
       - words_corpus_notfound.json chunks the dictionary could not resolve
  4) Optionally upsert merged entries into words_additional
  5) Store config + outcome in meta / runs for reproducibility

Also here:
- enrich_word_file(): dictionary enrichment of a plain word list (missing HSK
  words per band, custom word lists) without a corpus pass
- enrich_chunk_report(): re-resolve an unknown_chunks.tsv after manual edits
- coverage_stats(): word / sentence counts of the project DB
"""

from __future__ import annotations

import logging
import math
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..config import PipelineConfig
from ..corpus.sources import SqliteCorpus, TsvCorpus, simplify_rows
from ..coverage.aggregate import report_rows
from ..coverage.converge import ConvergenceController, ConvergenceState
from ..coverage.resolve import CORPUS_ORIGIN, DictionaryLookup, ResolveResult, enrich_word_list, resolve_unknowns
from ..dictionary.cedict import CedictDictionary
from ..errors import SourceUnavailable
from ..store.db import (
    connect,
    init_db,
    load_known_words,
    meta_put,
    record_run,
    source_counts,
    upsert_words,
    word_counts,
)
from ..text.segment import JiebaSegmenter, Segmenter
from ..utils.io import read_csv_column, read_level_columns, read_tsv, write_json, write_tsv
from ..vocab.sources import load_vocabulary

logger = logging.getLogger(__name__)

UNKNOWN_CHUNKS_TSV = "unknown_chunks.tsv"
CORPUS_WORDS_JSON = "words_corpus_cedict.json"
CORPUS_NOTFOUND_JSON = "words_corpus_notfound.json"
REPORT_COLUMNS = ("chunk", "count", "example_ids")


@dataclass(frozen=True)
class _ReportedChunk:
    chunk: str
    frequency: int


def _corpus_source(cfg: PipelineConfig) -> Union[TsvCorpus, SqliteCorpus]:
    if cfg.corpus_tsv:
        corpus = TsvCorpus(cfg.corpus_tsv)
    elif cfg.db_path:
        corpus = SqliteCorpus(cfg.db_path, cfg.corpus_table)
    else:
        raise SourceUnavailable("corpus", None, "no corpus configured (corpus_tsv or db_path)")
    corpus.validate()
    return corpus


def write_artifacts(state: ConvergenceState, out_dir: str | Path, example_limit: int = 5) -> Dict[str, Path]:
    out_dir = Path(out_dir)
    paths = {
        "unknown_chunks": write_tsv(out_dir / UNKNOWN_CHUNKS_TSV, report_rows(state.last_records, example_limit), REPORT_COLUMNS),
        "enriched": write_json(out_dir / CORPUS_WORDS_JSON, [e.to_record() for e in state.cumulative_enriched]),
        "notfound": write_json(out_dir / CORPUS_NOTFOUND_JSON, [u.to_record() for u in state.unresolved]),
    }
    return paths


def run_pipeline(cfg: PipelineConfig, segmenter: Optional[Segmenter] = None) -> ConvergenceState:
    dictionary = CedictDictionary.load(cfg.cedict_path)

    conn = None
    if cfg.db_path:
        conn = connect(cfg.db_path)
        init_db(conn)

    try:
        corpus = _corpus_source(cfg)
        vocab = load_vocabulary(
            hsk_json=cfg.hsk_json,
            entry_json=cfg.entry_json,
            db_conn=conn,
            db_tables=cfg.vocab_tables,
        )

        rows = (lambda: simplify_rows(corpus)) if cfg.simplify_corpus else corpus

        controller = ConvergenceController(
            segmenter or JiebaSegmenter(),
            dictionary,
            max_iterations=cfg.max_iterations,
            max_piece_length=cfg.max_piece_length,
            workers=cfg.workers,
            batch_size=cfg.batch_size,
            time_budget=cfg.time_budget,
            row_budget=cfg.row_budget,
            min_frequency=cfg.min_frequency,
        )
        state = controller.run(rows, vocab)

        paths = write_artifacts(state, cfg.out_dir, cfg.example_ids_limit)
        for name, p in paths.items():
            logger.info("wrote %s -> %s", name, p)

        if conn is not None:
            if cfg.write_db:
                n = upsert_words(conn, state.cumulative_enriched, table="words_additional")
                logger.info("upserted %d entries into words_additional", n)
            meta_put(conn, "last_convergence_status", state.status.value)
            meta_put(conn, "last_convergence_iterations", state.iteration)
            # no complete pass when the budget cut the first one short
            unknown = "" if math.isinf(state.unknown_count) else state.unknown_count
            meta_put(conn, "last_convergence_unknown", unknown)
            meta_put(conn, "config_hash", cfg.config_hash())
            meta_put(conn, "config_json", cfg.to_json())
            record_run(
                conn,
                "convergence",
                config_hash=cfg.config_hash(),
                status=state.status.value,
                notes=cfg.notes or state.exhausted_reason,
            )
    finally:
        if conn is not None:
            conn.close()

    return state


def enrich_word_file(
    path: str | Path,
    dictionary: DictionaryLookup,
    already_known: Any,
    out_dir: str | Path,
    *,
    origin_tag: str,
    column: Optional[str] = None,
    stem: str = "words_additional",
) -> ResolveResult:
    """
    column=None: the CSV has one column per HSK band ("1-3","4","5","6").
    column=name: a plain word list in that column.
    """
    if column is None:
        words: Any = read_level_columns(path)
    else:
        words = read_csv_column(path, column)

    res = enrich_word_list(words, dictionary, already_known, origin_tag=origin_tag)
    levels = words if isinstance(words, dict) else {}

    out_dir = Path(out_dir)
    write_json(out_dir / f"{stem}.json", [e.to_record() for e in res.resolved])
    if res.unresolved:
        write_json(
            out_dir / f"{stem}.notfound.json",
            [{"word": u.chunk, "hsk_approx": levels.get(u.chunk)} for u in res.unresolved],
        )
    logger.info(
        "%s: %d enriched, %d not in dictionary, %d already known",
        path, len(res.resolved), len(res.unresolved), res.skipped_known,
    )
    return res


def _reported_chunks(rows: Iterable[Dict[str, str]]) -> List[_ReportedChunk]:
    out: List[_ReportedChunk] = []
    for r in rows:
        chunk = (r.get("chunk") or "").strip()
        if not chunk:
            continue
        try:
            freq = int(r.get("count") or 0)
        except ValueError:
            freq = 0
        out.append(_ReportedChunk(chunk, freq))
    return out


def enrich_chunk_report(
    report_path: str | Path,
    dictionary: DictionaryLookup,
    already_known: Any,
    out_dir: str | Path,
    *,
    min_frequency: int = 1,
) -> ResolveResult:
    chunks = [c for c in _reported_chunks(read_tsv(report_path)) if c.frequency >= min_frequency]
    res = resolve_unknowns(chunks, dictionary, already_known, origin_tag=CORPUS_ORIGIN)

    out_dir = Path(out_dir)
    write_json(out_dir / CORPUS_WORDS_JSON, [e.to_record() for e in res.resolved])
    write_json(out_dir / CORPUS_NOTFOUND_JSON, [u.to_record() for u in res.unresolved])
    logger.info("%s: %d resolved, %d unresolved", report_path, len(res.resolved), len(res.unresolved))
    return res


def coverage_stats(conn: sqlite3.Connection) -> Dict[str, Any]:
    counts = word_counts(conn)
    return {
        "words_hsk": counts["words_hsk"],
        "words_additional": counts["words_additional"],
        "known_words": len(load_known_words(conn)),
        "sentences": counts["sentences"],
        "additional_by_source": source_counts(conn, "words_additional"),
    }
