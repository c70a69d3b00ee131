"""
coverage/converge.py

What this file does:
- Repeats {aggregate unknown chunks -> resolve in dictionary -> merge into vocabulary}
  until the unknown count stops decreasing, reaches zero, or a budget runs out.

State machine:
  IDLE -> ITERATING -> CONVERGED | EXHAUSTED

Each pass:
- aggregate against the CURRENT vocabulary -> unknown_count
- unknown_count == 0                       -> CONVERGED
- unknown_count >= previous unknown_count  -> CONVERGED (resolution not run this pass)
- otherwise resolve chunks seen in >= min_frequency sentences, upsert resolved
  entries (new VocabularySet), iteration += 1
- iteration reaches max_iterations         -> EXHAUSTED ("iteration ceiling")
- a time/row budget cuts a pass short      -> EXHAUSTED ("budget"); entries merged
  by earlier passes are kept, the partial pass is not resolved

How it fits:
- The vocabulary set is passed in and returned (state.vocabulary); nothing global is
  mutated, so the controller can be tested with synthetic corpora and dictionaries.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Union

from ..errors import ConvergenceExhausted
from ..text.segment import JiebaSegmenter, Segmenter
from ..text.splitter import DEFAULT_MAX_PIECE_LENGTH
from ..vocab.entry import VocabularyEntry, VocabularySet
from .aggregate import UnknownChunkRecord, aggregate_unknowns
from .resolve import DictionaryLookup, UnresolvedChunk, resolve_unknowns

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5

CorpusSource = Union[Iterable[Any], Callable[[], Iterable[Any]]]


class ConvergenceStatus(str, Enum):
    IDLE = "idle"
    ITERATING = "iterating"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class RoundReport:
    corpus_pass: int
    unknown_count: int
    resolved: int = 0
    unresolved: int = 0
    vocabulary_size: int = 0
    resolution_run: bool = False
    truncated: bool = False


@dataclass
class ConvergenceState:
    iteration: int = 0
    unknown_count: float = math.inf
    cumulative_enriched: List[VocabularyEntry] = field(default_factory=list)
    status: ConvergenceStatus = ConvergenceStatus.IDLE
    history: List[RoundReport] = field(default_factory=list)
    unresolved: List[UnresolvedChunk] = field(default_factory=list)
    last_records: List[UnknownChunkRecord] = field(default_factory=list)
    vocabulary: Optional[VocabularySet] = None
    exhausted_reason: Optional[str] = None

    @property
    def converged(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED

    @property
    def exhausted(self) -> bool:
        return self.status is ConvergenceStatus.EXHAUSTED

    def raise_if_exhausted(self) -> "ConvergenceState":
        if self.exhausted:
            raise ConvergenceExhausted(self)
        return self


class ConvergenceController:
    def __init__(
        self,
        segmenter: Segmenter,
        dictionary: DictionaryLookup,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
        workers: int = 1,
        batch_size: int = 500,
        time_budget: Optional[float] = None,
        row_budget: Optional[int] = None,
        min_frequency: int = 1,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self.segmenter = segmenter
        self.dictionary = dictionary
        self.max_iterations = int(max_iterations)
        self.max_piece_length = int(max_piece_length)
        self.workers = int(workers)
        self.batch_size = int(batch_size)
        self.time_budget = time_budget
        self.row_budget = row_budget
        self.min_frequency = int(min_frequency)

    @staticmethod
    def _open(corpus: CorpusSource) -> Iterable[Any]:
        return corpus() if callable(corpus) else corpus

    def run(self, corpus: CorpusSource, initial: Any) -> ConvergenceState:
        vocab = initial if isinstance(initial, VocabularySet) else VocabularySet.from_words(initial)
        state = ConvergenceState(vocabulary=vocab)

        # source-level failures surface here, before the first pass
        first = self._open(corpus)
        validate = getattr(first, "validate", None)
        if callable(validate):
            validate()

        state.status = ConvergenceStatus.ITERATING
        deadline = time.monotonic() + self.time_budget if self.time_budget is not None else None
        previous = math.inf
        corpus_pass = 0

        while True:
            corpus_pass += 1
            rows = first if corpus_pass == 1 else self._open(corpus)
            report = aggregate_unknowns(
                rows,
                vocab,
                self.segmenter,
                workers=self.workers,
                batch_size=self.batch_size,
                max_piece_length=self.max_piece_length,
                max_rows=self.row_budget,
                deadline=deadline,
            )
            count = report.unknown_count
            rnd = RoundReport(corpus_pass=corpus_pass, unknown_count=count, vocabulary_size=len(vocab))
            state.history.append(rnd)

            if report.truncated:
                rnd.truncated = True
                state.status = ConvergenceStatus.EXHAUSTED
                state.exhausted_reason = "budget"
                logger.warning("pass %d cut short by budget; keeping %d merged entries",
                               corpus_pass, len(state.cumulative_enriched))
                break

            state.unknown_count = count
            state.last_records = report.records

            if count == 0:
                state.status = ConvergenceStatus.CONVERGED
                state.unresolved = []
                logger.info("pass %d: no unknown chunks left", corpus_pass)
                break

            if count >= previous:
                state.status = ConvergenceStatus.CONVERGED
                logger.info("pass %d: %d unknown chunks, no improvement over %d; stopping",
                            corpus_pass, count, previous)
                break

            candidates = [r for r in report.records if r.frequency >= self.min_frequency]
            result = resolve_unknowns(candidates, self.dictionary, vocab)
            vocab = vocab.upsert(result.resolved)
            state.cumulative_enriched.extend(result.resolved)
            state.unresolved = result.unresolved
            state.iteration += 1
            previous = count

            rnd.resolution_run = True
            rnd.resolved = len(result.resolved)
            rnd.unresolved = len(result.unresolved)
            rnd.vocabulary_size = len(vocab)
            logger.info("pass %d: %d unknown, %d resolved, %d unresolved, vocabulary=%d",
                        corpus_pass, count, rnd.resolved, rnd.unresolved, len(vocab))

            if state.iteration >= self.max_iterations:
                state.status = ConvergenceStatus.EXHAUSTED
                state.exhausted_reason = "iteration ceiling"
                logger.warning("stopped after %d iterations; %d chunks unresolved",
                               state.iteration, len(state.unresolved))
                break

        state.vocabulary = vocab
        return state


def run_convergence(
    corpus: CorpusSource,
    dictionary: DictionaryLookup,
    initial_known: Any,
    segmenter: Optional[Segmenter] = None,
    **kwargs: Any,
) -> ConvergenceState:
    controller = ConvergenceController(segmenter or JiebaSegmenter(), dictionary, **kwargs)
    return controller.run(corpus, initial_known)
