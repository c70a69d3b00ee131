"""
text/classify.py

What this file does:
- Single home for Chinese character classification:
  CJK detection, Chinese punctuation, ASCII detection, light normalization.

How it fits:
- The aggregator, the coverage scorer, the component parser and the corpus loaders
  all filter segments with the same predicates, so they can never disagree about
  what counts as punctuation or as a "real" Chinese segment.
"""

from __future__ import annotations

import re

CHINESE_PUNCTUATION = frozenset(
  [
    "。", "，", "、", "；", "：", "？", "！",
    "“", "”", "‘", "’",  # quotes
    "（", "）", "【", "】", "《", "》",
    "—", "…", "·", "～",
  ]
)

_ASCII_RE = re.compile(r"[A-Za-z0-9]")
_WS_RE = re.compile(r"\s+")


def is_cjk(ch: str) -> bool:
  """CJK Unified Ideographs (U+4E00..U+9FFF)."""
  if not ch:
    return False
  o = ord(ch[0])
  return 0x4E00 <= o <= 0x9FFF


def is_chinese_punctuation(s: str) -> bool:
  return len(s) == 1 and s in CHINESE_PUNCTUATION


def is_all_punctuation(s: str) -> bool:
  return bool(s) and all(ch in CHINESE_PUNCTUATION for ch in s)


def contains_cjk(s: str) -> bool:
  return any(is_cjk(ch) for ch in s)


def has_ascii(s: str) -> bool:
  return _ASCII_RE.search(s) is not None


def normalize_zh(text: str) -> str:
  text = (text or "").strip()
  text = _WS_RE.sub(" ", text)
  return text


def is_countable_segment(segment: str) -> bool:
  """
  A segment takes part in aggregation and scoring iff it is not a single
  Chinese punctuation mark and contains at least one CJK character.
  """
  if is_chinese_punctuation(segment):
    return False
  return contains_cjk(segment)
