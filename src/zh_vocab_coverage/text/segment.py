"""
text/segment.py

What this file does:
- Defines the Segmenter interface: segment(text) -> list[str].
- Provides two interchangeable implementations:
  1) JiebaSegmenter: the statistical word segmenter used in production
  2) TrieSegmenter: dictionary longest-match segmentation (deterministic, no model)

How it fits:
- The aggregator, the coverage scorer and the component parser take a Segmenter as
  an argument; they never import jieba directly.
- Segments must concatenate back to the input text. Both implementations keep every
  character (punctuation and whitespace included); filtering is the caller's job.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Tuple

import jieba


class Segmenter(Protocol):
    def segment(self, text: str) -> List[str]:
        ...


class JiebaSegmenter:
    """
    Wraps a private jieba.Tokenizer so extra words never leak into the global
    jieba dictionary shared with other code in the process.
    """

    def __init__(self, user_words: Optional[Iterable[str]] = None, hmm: bool = True) -> None:
        self.hmm = hmm
        self._tokenizer = jieba.Tokenizer()
        if user_words:
            for w in user_words:
                self._tokenizer.add_word(w)

    def segment(self, text: str) -> List[str]:
        if not text:
            return []
        return [t for t in self._tokenizer.cut(text, cut_all=False, HMM=self.hmm) if t]


class TrieNode:
    __slots__ = ("children", "terminal_word")

    def __init__(self) -> None:
        self.children: Dict[str, "TrieNode"] = {}
        self.terminal_word: Optional[str] = None


class TrieSegmenter:
    """
    Forward longest-match segmentation over a fixed word list.

    Characters with no match become single-character segments, so the output
    always reproduces the input.
    """

    def __init__(self, words: Iterable[str]) -> None:
        self.trie = TrieNode()
        for w in words:
            if not w:
                continue
            node = self.trie
            for ch in w:
                node = node.children.setdefault(ch, TrieNode())
            node.terminal_word = w

    def longest_match(self, text: str, start: int) -> Optional[Tuple[str, int]]:
        """
        Returns (word, end_index) for the longest word match starting at `start`, or None.
        end_index is exclusive.
        """
        node = self.trie
        best_word: Optional[str] = None
        best_end = start

        i = start
        while i < len(text):
            ch = text[i]
            if ch not in node.children:
                break
            node = node.children[ch]
            i += 1
            if node.terminal_word is not None:
                best_word = node.terminal_word
                best_end = i

        if best_word is None:
            return None
        return best_word, best_end

    def segment(self, text: str) -> List[str]:
        out: List[str] = []
        i = 0
        while i < len(text):
            m = self.longest_match(text, i)
            if m is not None:
                w, j = m
                out.append(w)
                i = j
                continue
            out.append(text[i])
            i += 1
        return out
