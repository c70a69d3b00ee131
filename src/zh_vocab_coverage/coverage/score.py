"""
coverage/score.py

What this file does:
- Scores how much of a sentence one learner can read:
    score = known_segments / total_segments   (0 when there are no countable segments)
- Selects quiz sentences whose score falls inside [min_coverage, max_coverage].

How it fits:
- Same segmenter + splitter as the aggregator, but against a learner's own
  vocabulary instead of the global one. Nothing is mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..errors import MalformedRecord
from ..text.classify import has_ascii, is_countable_segment
from ..text.segment import Segmenter
from ..text.splitter import DEFAULT_MAX_PIECE_LENGTH, is_fully_known, split_token
from ..vocab.entry import word_set

logger = logging.getLogger(__name__)

DEFAULT_MIN_COVERAGE = 0.80
DEFAULT_MAX_COVERAGE = 0.95

QUIZ_COLUMNS = ("zh_id", "coverage", "total_segments", "known_segments", "unknown_segments", "zh", "en")


@dataclass(frozen=True)
class CoverageResult:
    sentence_id: Any
    score: float
    total_segments: int
    known_segments: int
    unknown_segments: Tuple[str, ...]


@dataclass(frozen=True)
class QuizCandidate:
    sentence_id: Any
    zh: str
    en: str
    coverage: CoverageResult


def score_sentence(
    text: str,
    learner_known: Any,
    segmenter: Segmenter,
    *,
    sentence_id: Any = None,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
) -> CoverageResult:
    known = word_set(learner_known)
    total = 0
    known_n = 0
    unknown: List[str] = []

    for seg in segmenter.segment(text):
        if not is_countable_segment(seg):
            continue
        total += 1
        if seg in known or is_fully_known(split_token(seg, known, max_piece_length)):
            known_n += 1
        else:
            unknown.append(seg)

    score = known_n / total if total else 0.0
    return CoverageResult(
        sentence_id=sentence_id,
        score=score,
        total_segments=total,
        known_segments=known_n,
        unknown_segments=tuple(unknown),
    )


def _row_triple(row: Any) -> Tuple[Any, str, str]:
    if hasattr(row, "zh"):
        return getattr(row, "id", None), row.zh, getattr(row, "en", "") or ""
    if isinstance(row, (tuple, list)) and len(row) >= 2:
        en = row[2] if len(row) > 2 and row[2] is not None else ""
        return row[0], row[1], en
    raise MalformedRecord("corpus", None, row)


def select_quiz_sentences(
    corpus: Iterable[Any],
    learner_known: Any,
    segmenter: Segmenter,
    *,
    min_coverage: float = DEFAULT_MIN_COVERAGE,
    max_coverage: float = DEFAULT_MAX_COVERAGE,
    limit: Optional[int] = None,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
) -> List[QuizCandidate]:
    if min_coverage > max_coverage:
        raise ValueError(f"min_coverage {min_coverage} > max_coverage {max_coverage}")

    # build the set once, not per sentence
    known = word_set(learner_known)
    out: List[QuizCandidate] = []

    for row in corpus:
        if limit is not None and len(out) >= limit:
            break
        try:
            sid, zh, en = _row_triple(row)
            if has_ascii(zh):
                continue
            res = score_sentence(zh, known, segmenter, sentence_id=sid, max_piece_length=max_piece_length)
        except (MalformedRecord, ValueError, TypeError, UnicodeError) as exc:
            logger.warning("sentence excluded from quiz selection: %s", exc)
            continue

        if min_coverage <= res.score <= max_coverage:
            out.append(QuizCandidate(sentence_id=sid, zh=zh, en=en, coverage=res))

    logger.info("selected %d quiz sentences in [%.2f, %.2f]", len(out), min_coverage, max_coverage)
    return out


def quiz_rows(candidates: Iterable[QuizCandidate]) -> List[Dict[str, Any]]:
    return [
        {
            "zh_id": c.sentence_id,
            "coverage": f"{c.coverage.score:.3f}",
            "total_segments": c.coverage.total_segments,
            "known_segments": c.coverage.known_segments,
            "unknown_segments": ",".join(c.coverage.unknown_segments),
            "zh": c.zh,
            "en": c.en,
        }
        for c in candidates
    ]
