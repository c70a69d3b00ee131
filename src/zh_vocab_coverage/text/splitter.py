"""
text/splitter.py

What this file does:
- Splits one segment into an ordered list of known/unknown pieces against a
  vocabulary set, maximizing the characters covered by known words.

How it fits:
- The segmenter gives coarse segments; when a segment is not itself a known word,
  this splitter decides which parts of it are known.
- Used by the unknown-chunk aggregator (global vocabulary) and by the coverage
  scorer (a learner's vocabulary).

Objective, in order:
  1) maximize characters covered by known pieces
  2) minimize the number of pieces
Adjacent pieces with the same status are merged afterwards, so the output
alternates known/unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Sequence

DEFAULT_MAX_PIECE_LENGTH = 6


@dataclass(frozen=True)
class Piece:
    text: str
    is_known: bool


@dataclass
class _State:
    covered: int
    pieces: int
    prev: int
    text: str
    known: bool

    def better_than(self, other: Optional["_State"]) -> bool:
        if other is None:
            return True
        if self.covered != other.covered:
            return self.covered > other.covered
        return self.pieces < other.pieces


def split_token(
    token: str,
    known: AbstractSet[str],
    max_piece_length: int = DEFAULT_MAX_PIECE_LENGTH,
    merge_known: bool = True,
) -> List[Piece]:
    """
    Returns the optimal known/unknown decomposition of `token`.

    With merge_known=False only unknown runs are merged, so each known piece is
    a single vocabulary word (useful when a caller wants per-word metadata).
    """
    if max_piece_length < 1:
        raise ValueError(f"max_piece_length must be >= 1, got {max_piece_length}")

    chars = list(token)
    n = len(chars)
    if n == 0:
        return []

    dp: List[Optional[_State]] = [None] * (n + 1)
    dp[0] = _State(covered=0, pieces=0, prev=-1, text="", known=False)

    for i in range(n):
        cur = dp[i]
        if cur is None:
            continue

        # single character as unknown
        cand = _State(cur.covered, cur.pieces + 1, i, chars[i], False)
        if cand.better_than(dp[i + 1]):
            dp[i + 1] = cand

        # known words starting at i
        for length in range(1, min(max_piece_length, n - i) + 1):
            word = "".join(chars[i : i + length])
            if word not in known:
                continue
            cand = _State(cur.covered + length, cur.pieces + 1, i, word, True)
            if cand.better_than(dp[i + length]):
                dp[i + length] = cand

    # backtrack n -> 0
    path: List[Piece] = []
    pos = n
    while pos > 0:
        st = dp[pos]
        assert st is not None  # every position is reachable via the unknown transition
        path.append(Piece(st.text, st.known))
        pos = st.prev
    path.reverse()

    merged: List[Piece] = []
    for p in path:
        if merged and merged[-1].is_known == p.is_known and (merge_known or not p.is_known):
            merged[-1] = Piece(merged[-1].text + p.text, p.is_known)
        else:
            merged.append(p)
    return merged


def pieces_text(pieces: Sequence[Piece]) -> str:
    return "".join(p.text for p in pieces)


def is_fully_known(pieces: Sequence[Piece]) -> bool:
    return all(p.is_known for p in pieces)


def unknown_texts(pieces: Sequence[Piece]) -> List[str]:
    return [p.text for p in pieces if not p.is_known]
