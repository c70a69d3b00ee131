"""
coverage/resolve.py

What this file does:
- Looks up aggregated unknown chunks in the bilingual dictionary and partitions them:
  - resolved: structured VocabularyEntry rows (tone-marked pinyin added)
  - unresolved: chunks the dictionary does not know (rare words, proper nouns)
- The same lookup also enriches plain word lists (missing-HSK lists, custom words).

How it fits:
- The convergence controller merges `resolved` into the vocabulary set each round.
- `unresolved` of the final round is the manual-curation list.

Rules:
- A chunk already in `already_known` is skipped (not enriched, not unresolved).
- Resolved entries are ordered by descending corpus frequency (stable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from ..dictionary.pinyin import numeric_to_tone_marks
from ..vocab.entry import VocabularyEntry, word_set
from .aggregate import UnknownChunkRecord

CORPUS_ORIGIN = "corpus-cedict"


class DictionaryHit(Protocol):
    traditional: str
    simplified: str
    pinyin: str
    definitions: Any


class DictionaryLookup(Protocol):
    def get(self, simplified: str) -> Optional[DictionaryHit]:
        ...


@dataclass(frozen=True)
class UnresolvedChunk:
    chunk: str
    frequency: int

    def to_record(self) -> Dict[str, Any]:
        return {"word": self.chunk, "frequency": self.frequency}


@dataclass
class ResolveResult:
    resolved: List[VocabularyEntry] = field(default_factory=list)
    unresolved: List[UnresolvedChunk] = field(default_factory=list)
    skipped_known: int = 0


def entry_from_hit(
    hit: DictionaryHit,
    origin_tag: str,
    frequency: Optional[int] = None,
    hsk_level: Optional[str] = None,
) -> VocabularyEntry:
    return VocabularyEntry(
        simplified=hit.simplified,
        traditional=hit.traditional,
        pinyin_numeric=hit.pinyin,
        pinyin_display=numeric_to_tone_marks(hit.pinyin),
        definitions=tuple(hit.definitions),
        origin_tag=origin_tag,
        frequency=frequency,
        hsk_level=hsk_level,
    )


def resolve_unknowns(
    chunks: Iterable[UnknownChunkRecord],
    dictionary: DictionaryLookup,
    already_known: Any = (),
    origin_tag: str = CORPUS_ORIGIN,
) -> ResolveResult:
    known = word_set(already_known)
    out = ResolveResult()

    for rec in chunks:
        if rec.chunk in known:
            out.skipped_known += 1
            continue
        hit = dictionary.get(rec.chunk)
        if hit is None:
            out.unresolved.append(UnresolvedChunk(rec.chunk, rec.frequency))
            continue
        out.resolved.append(entry_from_hit(hit, origin_tag, frequency=rec.frequency))

    out.resolved.sort(key=lambda e: -(e.frequency or 0))
    return out


def enrich_word_list(
    words: Union[Mapping[str, Optional[str]], Iterable[str]],
    dictionary: DictionaryLookup,
    already_known: Any = (),
    origin_tag: str = "custom",
) -> ResolveResult:
    """
    words: iterable of words, or mapping word -> approximate HSK band.
    Unresolved words carry frequency 0.
    """
    levels: Mapping[str, Optional[str]] = words if isinstance(words, Mapping) else {w: None for w in words}
    known = word_set(already_known)
    out = ResolveResult()

    for w, level in levels.items():
        if w in known:
            out.skipped_known += 1
            continue
        hit = dictionary.get(w)
        if hit is None:
            out.unresolved.append(UnresolvedChunk(w, 0))
            continue
        out.resolved.append(entry_from_hit(hit, origin_tag, hsk_level=level))
    return out
