"""
vocab/entry.py

What this file does:
- VocabularyEntry: one structured word (simplified, traditional, pinyin, definitions).
- VocabularySet: an owned, copy-on-write set of known words keyed by `simplified`.

How it fits:
- Seed sources (HSK, custom word lists, SQLite tables) build the initial set.
- The convergence controller upserts resolved entries round after round; every
  upsert returns a NEW VocabularySet, so an in-flight aggregation pass always sees
  a stable snapshot.
- Learner vocabularies are plain word sets (no metadata) built with from_words().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Any, Dict, Iterable, Iterator, List, Mapping, Optional


@dataclass(frozen=True)
class VocabularyEntry:
  simplified: str
  traditional: str
  pinyin_numeric: str
  pinyin_display: str
  definitions: tuple[str, ...] = field(default_factory=tuple)
  origin_tag: str = ""
  frequency: Optional[int] = None
  hsk_level: Optional[str] = None

  def to_record(self) -> Dict[str, Any]:
    """JSON artifact row (the shape consumed by the word seeding step)."""
    rec: Dict[str, Any] = {
      "simplified_zh": self.simplified,
      "traditional_zh": self.traditional,
      "pinyin_numeric": self.pinyin_numeric,
      "pinyin": self.pinyin_display,
      "definitions": list(self.definitions),
      "source": self.origin_tag,
    }
    if self.frequency is not None:
      rec["frequency_in_corpus"] = self.frequency
    if self.hsk_level is not None:
      rec["hsk_approx"] = self.hsk_level
    return rec

  @classmethod
  def from_record(cls, rec: Mapping[str, Any], origin_tag: str = "") -> "VocabularyEntry":
    simp = str(rec.get("simplified_zh") or rec.get("simplified") or "").strip()
    if not simp:
      raise ValueError(f"record has no simplified form: {dict(rec)!r}")

    defs = rec.get("definitions")
    if defs is None:
      defs = rec.get("english", rec.get("en"))
    if defs is None:
      defs = []
    elif isinstance(defs, str):
      defs = [defs]

    freq = rec.get("frequency_in_corpus")
    level = rec.get("hsk_approx")
    return cls(
      simplified=simp,
      traditional=str(rec.get("traditional_zh") or rec.get("traditional") or ""),
      pinyin_numeric=str(rec.get("pinyin_numeric") or ""),
      pinyin_display=str(rec.get("pinyin") or ""),
      definitions=tuple(str(d) for d in defs),
      origin_tag=str(rec.get("source") or origin_tag),
      frequency=int(freq) if freq is not None else None,
      hsk_level=str(level) if level is not None else None,
    )


class VocabularySet:
  """
  Immutable-by-convention mapping simplified -> entry (or None for bare words).

  Membership is what the splitter cares about; entries are kept for artifacts and
  for component pinyin lookup.
  """

  __slots__ = ("_entries", "_words")

  def __init__(self, entries: Optional[Mapping[str, Optional[VocabularyEntry]]] = None) -> None:
    self._entries: Dict[str, Optional[VocabularyEntry]] = dict(entries or {})
    self._words = frozenset(self._entries)

  @classmethod
  def from_words(cls, words: Iterable[str]) -> "VocabularySet":
    return cls({w: None for w in words if w})

  @classmethod
  def from_entries(cls, entries: Iterable[VocabularyEntry]) -> "VocabularySet":
    return cls().upsert(entries)

  @classmethod
  def union(cls, *sets: "VocabularySet") -> "VocabularySet":
    """
    Later sets win for entries; a bare word never overwrites an existing entry.
    """
    merged: Dict[str, Optional[VocabularyEntry]] = {}
    for s in sets:
      for w, e in s._entries.items():
        if e is None and merged.get(w) is not None:
          continue
        merged[w] = e
    return cls(merged)

  @property
  def words(self) -> frozenset[str]:
    return self._words

  def upsert(self, entries: Iterable[VocabularyEntry]) -> "VocabularySet":
    merged = dict(self._entries)
    for e in entries:
      merged[e.simplified] = e
    return VocabularySet(merged)

  def get(self, word: str) -> Optional[VocabularyEntry]:
    return self._entries.get(word)

  def entries(self) -> List[VocabularyEntry]:
    return [e for e in self._entries.values() if e is not None]

  def __contains__(self, word: object) -> bool:
    return word in self._words

  def __len__(self) -> int:
    return len(self._words)

  def __iter__(self) -> Iterator[str]:
    return iter(self._entries)

  def __repr__(self) -> str:
    return f"VocabularySet(size={len(self)})"


def word_set(known: "VocabularySet | AbstractSet[str] | Iterable[str]") -> AbstractSet[str]:
  """Accepts a VocabularySet or any collection of words; returns a set view."""
  if isinstance(known, VocabularySet):
    return known.words
  if isinstance(known, (set, frozenset)):
    return known
  return frozenset(known)
