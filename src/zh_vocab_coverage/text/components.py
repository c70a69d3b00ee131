"""
text/components.py

What this file does:
- Turns one sentence into display components for the reading/quiz view:
  WordComponent(text, punctuation, known, pinyin)

Per segment:
  - non-word segment (punctuation, whitespace, symbols) -> one punctuation component
  - known word                                         -> one known component
  - otherwise, optionally:
      char_fallback:     every character is a known word -> one component per character
      quantity_fallback: segment = known + known (e.g. 十分钟 = 十 + 分钟) -> two components
  - otherwise the splitter pieces, with known words kept separate

How it fits:
- Same segmenter + splitter as aggregation and scoring; the two fallbacks are
  heuristics and stay off unless asked for.
- The components must rebuild the (normalized) sentence exactly; if they do not,
  ReconstructionMismatch is raised and the caller skips the sentence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, List, Optional, Protocol

from ..errors import ReconstructionMismatch
from .classify import is_countable_segment, normalize_zh
from .segment import Segmenter
from .splitter import DEFAULT_MAX_PIECE_LENGTH, split_token
from ..vocab.entry import word_set


class EntryLookup(Protocol):
    def get(self, word: str) -> Any:
        ...


@dataclass(frozen=True)
class WordComponent:
    text: str
    punctuation: bool = False
    known: bool = False
    pinyin: Optional[str] = None


def _known_component(word: str, lookup: Optional[EntryLookup]) -> WordComponent:
    pinyin = None
    if lookup is not None:
        entry = lookup.get(word)
        if entry is not None:
            pinyin = getattr(entry, "pinyin_display", None) or None
    return WordComponent(text=word, known=True, pinyin=pinyin)


def _char_split(segment: str, known: AbstractSet[str]) -> Optional[List[str]]:
    if len(segment) < 2 or not all(ch in known for ch in segment):
        return None
    return list(segment)


def _quantity_split(segment: str, known: AbstractSet[str]) -> Optional[List[str]]:
    for i in range(1, len(segment)):
        head, tail = segment[:i], segment[i:]
        if head in known and tail in known:
            return [head, tail]
    return None


def parse_components(
    sentence: str,
    known: Any,
    segmenter: Segmenter,
    *,
    char_fallback: bool = False,
    quantity_fallback: bool = False,
    lookup: Optional[EntryLookup] = None,
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
) -> List[WordComponent]:
    words = word_set(known)
    text = normalize_zh(sentence)
    out: List[WordComponent] = []

    for seg in segmenter.segment(text):
        if not is_countable_segment(seg):
            out.append(WordComponent(text=seg, punctuation=True))
            continue

        if seg in words:
            out.append(_known_component(seg, lookup))
            continue

        parts = None
        if char_fallback:
            parts = _char_split(seg, words)
        if parts is None and quantity_fallback:
            parts = _quantity_split(seg, words)
        if parts is not None:
            out.extend(_known_component(p, lookup) for p in parts)
            continue

        for piece in split_token(seg, words, max_piece_length, merge_known=False):
            if piece.is_known:
                out.append(_known_component(piece.text, lookup))
            else:
                out.append(WordComponent(text=piece.text))

    rebuilt = "".join(c.text for c in out)
    if rebuilt != text:
        raise ReconstructionMismatch(text, rebuilt)
    return out
