"""
coverage/aggregate.py

What this file does:
- Runs segmenter + splitter over a corpus and collects every unknown piece with
  the ids of the sentences it occurs in.
- Produces a frequency-ranked list of UnknownChunkRecord (frequency = number of
  distinct sentences).

Per sentence:
  1) skip if it contains ASCII letters/digits (mixed-script sentences are excluded
     as a policy; a Latin proper noun would otherwise be reported as "unknown")
  2) normalize whitespace, segment; the segments must concatenate back to the
     normalized sentence
  3) skip punctuation / non-CJK segments and segments that are known words
  4) split the rest into known/unknown pieces; record unknown pieces that are not
     pure punctuation

Determinism:
- Records are ordered by descending frequency; ties keep first-discovery order.
- With workers > 1, batches run on a thread pool, but each batch fills its own
  partial map and partial maps are merged in batch order. The output is identical
  to a serial pass.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import islice
from typing import AbstractSet, Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import MalformedRecord, ReconstructionMismatch
from ..text.classify import has_ascii, is_all_punctuation, is_countable_segment, normalize_zh
from ..text.segment import Segmenter
from ..text.splitter import DEFAULT_MAX_PIECE_LENGTH, pieces_text, split_token
from ..vocab.entry import word_set

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLE_IDS = 5


@dataclass
class UnknownChunkRecord:
    chunk: str
    sentence_ids: Tuple[Any, ...]

    @property
    def frequency(self) -> int:
        return len(self.sentence_ids)

    def example_ids(self, limit: int = DEFAULT_EXAMPLE_IDS) -> List[Any]:
        return list(self.sentence_ids[:limit])


@dataclass
class AggregationReport:
    records: List[UnknownChunkRecord] = field(default_factory=list)
    sentences_seen: int = 0
    sentences_used: int = 0
    skipped_ascii: int = 0
    skipped_malformed: int = 0
    mismatched: int = 0
    truncated: bool = False

    @property
    def unknown_count(self) -> int:
        return len(self.records)


@dataclass
class _BatchResult:
    chunks: Dict[str, Dict[Any, None]] = field(default_factory=dict)
    seen: int = 0
    used: int = 0
    skipped_ascii: int = 0
    skipped_malformed: int = 0
    mismatched: int = 0


def _row_fields(row: Any) -> Tuple[Any, str]:
    if hasattr(row, "zh"):
        sid, zh = getattr(row, "id", None), row.zh
    elif isinstance(row, (tuple, list)) and len(row) >= 2:
        sid, zh = row[0], row[1]
    else:
        raise MalformedRecord("corpus", None, row)
    if not isinstance(zh, str):
        raise MalformedRecord("corpus", None, row)
    return sid, zh


def find_unknown_chunks(
    sentence: str,
    known: AbstractSet[str],
    segmenter: Segmenter,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
) -> List[str]:
    """
    Unknown pieces of one sentence, in sentence order (may repeat).
    Raises ReconstructionMismatch if segmentation or splitting loses text.
    The sentence is whitespace-normalized before segmenting.
    """
    sentence = normalize_zh(sentence)
    segments = segmenter.segment(sentence)
    rebuilt = "".join(segments)
    if rebuilt != sentence:
        raise ReconstructionMismatch(sentence, rebuilt)

    out: List[str] = []
    for seg in segments:
        if not is_countable_segment(seg):
            continue
        if seg in known:
            continue

        pieces = split_token(seg, known, max_piece_length)
        if pieces_text(pieces) != seg:
            raise ReconstructionMismatch(seg, pieces_text(pieces))

        for p in pieces:
            if p.is_known or is_all_punctuation(p.text):
                continue
            out.append(p.text)
    return out


def _process_batch(
    rows: List[Any],
    known: AbstractSet[str],
    segmenter: Segmenter,
    max_piece_length: int,
) -> _BatchResult:
    res = _BatchResult()
    for row in rows:
        res.seen += 1
        try:
            sid, zh = _row_fields(row)
        except MalformedRecord as exc:
            res.skipped_malformed += 1
            logger.warning("skipping %s", exc)
            continue

        if has_ascii(zh):
            res.skipped_ascii += 1
            continue

        try:
            chunks = find_unknown_chunks(zh, known, segmenter, max_piece_length)
        except ReconstructionMismatch as exc:
            res.mismatched += 1
            logger.warning("sentence %s discarded: %s", sid, exc)
            continue
        except (ValueError, TypeError, UnicodeError) as exc:
            res.skipped_malformed += 1
            logger.warning("sentence %s skipped, segmentation failed: %s", sid, exc)
            continue

        res.used += 1
        for c in chunks:
            res.chunks.setdefault(c, {})[sid] = None
    return res


def _batches(rows: Iterator[Any], batch_size: int, max_rows: Optional[int]) -> Iterator[List[Any]]:
    taken = 0
    while True:
        n = batch_size
        if max_rows is not None:
            n = min(n, max_rows - taken)
            if n <= 0:
                return
        batch = list(islice(rows, n))
        if not batch:
            return
        taken += len(batch)
        yield batch


def aggregate_unknowns(
    corpus: Iterable[Any],
    known: Any,
    segmenter: Segmenter,
    *,
    workers: int = 1,
    batch_size: int = 500,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
    max_rows: Optional[int] = None,
    deadline: Optional[float] = None,
) -> AggregationReport:
    """
    corpus: iterable of CorpusRow or (id, zh[, en]) tuples
    known: VocabularySet or any set of words
    deadline: time.monotonic() value after which no new batch is started
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    if max_piece_length < 1:
        raise ValueError(f"max_piece_length must be >= 1, got {max_piece_length}")

    words = word_set(known)
    rows = iter(corpus)
    merged: Dict[str, Dict[Any, None]] = {}
    report = AggregationReport()

    def absorb(part: _BatchResult) -> None:
        report.sentences_seen += part.seen
        report.sentences_used += part.used
        report.skipped_ascii += part.skipped_ascii
        report.skipped_malformed += part.skipped_malformed
        report.mismatched += part.mismatched
        for chunk, ids in part.chunks.items():
            merged.setdefault(chunk, {}).update(ids)

    batches = _batches(rows, batch_size, max_rows)

    def out_of_time() -> bool:
        return deadline is not None and time.monotonic() >= deadline

    if workers <= 1:
        for batch in batches:
            if out_of_time():
                report.truncated = True
                break
            absorb(_process_batch(batch, words, segmenter, max_piece_length))
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            while True:
                wave = list(islice(batches, workers))
                if not wave:
                    break
                # only a cut when unprocessed batches remain, as in the serial loop
                if out_of_time():
                    report.truncated = True
                    break
                # map() yields results in submission order
                for part in pool.map(lambda b: _process_batch(b, words, segmenter, max_piece_length), wave):
                    absorb(part)

    if max_rows is not None and report.sentences_seen >= max_rows:
        # only a real cut if rows remain
        if next(rows, None) is not None:
            report.truncated = True

    records = [UnknownChunkRecord(chunk=c, sentence_ids=tuple(ids)) for c, ids in merged.items()]
    records.sort(key=lambda r: -r.frequency)
    report.records = records

    logger.info(
        "aggregated %d unknown chunks from %d/%d sentences (ascii=%d malformed=%d mismatched=%d%s)",
        len(records),
        report.sentences_used,
        report.sentences_seen,
        report.skipped_ascii,
        report.skipped_malformed,
        report.mismatched,
        ", truncated" if report.truncated else "",
    )
    return report


def report_rows(records: Iterable[UnknownChunkRecord], example_limit: int = DEFAULT_EXAMPLE_IDS) -> List[Dict[str, Any]]:
    """Rows for the chunk / count / example_ids TSV artifact."""
    return [
        {
            "chunk": r.chunk,
            "count": r.frequency,
            "example_ids": ",".join(str(i) for i in r.example_ids(example_limit)),
        }
        for r in records
    ]


SENTENCE_REPORT_COLUMNS = ("id", "zh", "en", "unknown_chars")


def sentences_with_unknown(
    corpus: Iterable[Any],
    known: Any,
    segmenter: Segmenter,
    *,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
) -> Iterator[Dict[str, Any]]:
    """
    Per-sentence view of the same pass: one row per sentence that still has unknown
    pieces, with its distinct unknown pieces (comma-joined, sentence order).
    ASCII sentences and lossy segmentations are skipped as in aggregate_unknowns().
    """
    words = word_set(known)
    for row in corpus:
        try:
            sid, zh = _row_fields(row)
        except MalformedRecord as exc:
            logger.warning("skipping %s", exc)
            continue
        if has_ascii(zh):
            continue
        try:
            chunks = find_unknown_chunks(zh, words, segmenter, max_piece_length)
        except ReconstructionMismatch as exc:
            logger.warning("sentence %s discarded: %s", sid, exc)
            continue
        if not chunks:
            continue
        en = getattr(row, "en", None) if hasattr(row, "zh") else (row[2] if len(row) > 2 else None)
        yield {
            "id": sid,
            "zh": zh,
            "en": en or "",
            "unknown_chars": ",".join(dict.fromkeys(chunks)),
        }
