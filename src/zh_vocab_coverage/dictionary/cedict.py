"""
dictionary/cedict.py

Purpose
-------
Load CC-CEDICT into a read-only lookup keyed by simplified Chinese.

Line format:
  TRAD SIMP [PINYIN] /def1/def2/.../

Rules
-----
- Comment lines (#...) and blank lines are ignored.
- Lines that do not match the format are skipped and counted (skipped_lines).
- Duplicate simplified keys: the FIRST entry seen wins (CC-CEDICT lists the most
  common reading first).
- A missing or unreadable file is fatal (SourceUnavailable), before any lookup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from ..errors import MalformedRecord, SourceUnavailable

logger = logging.getLogger(__name__)

CEDICT_RE = re.compile(r"^(.+?)\s+(.+?)\s+\[(.+?)\]\s+/(.+)/\s*$")


@dataclass(frozen=True)
class CedictEntry:
    traditional: str
    simplified: str
    pinyin: str
    definitions: tuple[str, ...]


def parse_cedict_line(line: str, line_no: Optional[int] = None) -> Optional[CedictEntry]:
    """
    Returns None for comments/blank lines, raises MalformedRecord for lines that
    are neither a comment nor a valid entry.
    """
    line = line.rstrip("\r\n")
    if line.startswith("#") or not line.strip():
        return None

    m = CEDICT_RE.match(line)
    if not m:
        raise MalformedRecord("dictionary", line_no, line)

    trad, simp, pinyin, defs_raw = m.groups()
    defs = tuple(d for d in defs_raw.split("/") if d.strip())
    return CedictEntry(traditional=trad, simplified=simp, pinyin=pinyin, definitions=defs)


class CedictDictionary:
    """Read-only simplified -> CedictEntry lookup."""

    def __init__(self, entries: Optional[Dict[str, CedictEntry]] = None, skipped_lines: int = 0) -> None:
        self._entries: Dict[str, CedictEntry] = dict(entries or {})
        self.skipped_lines = skipped_lines

    @classmethod
    def from_entries(cls, entries: Iterable[CedictEntry]) -> "CedictDictionary":
        out: Dict[str, CedictEntry] = {}
        for e in entries:
            out.setdefault(e.simplified, e)
        return cls(out)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "CedictDictionary":
        out: Dict[str, CedictEntry] = {}
        skipped = 0
        for i, line in enumerate(lines, start=1):
            try:
                entry = parse_cedict_line(line, line_no=i)
            except MalformedRecord as exc:
                skipped += 1
                logger.debug("skipping %s", exc)
                continue
            if entry is not None and entry.simplified not in out:
                out[entry.simplified] = entry
        if skipped:
            logger.warning("dictionary: skipped %d malformed lines", skipped)
        return cls(out, skipped_lines=skipped)

    @classmethod
    def load(cls, path: str | Path) -> "CedictDictionary":
        path = Path(path)
        if not path.exists():
            raise SourceUnavailable("dictionary", path, "file not found")
        try:
            with path.open("r", encoding="utf-8") as f:
                d = cls.from_lines(f)
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable("dictionary", path, str(exc)) from exc
        logger.info("loaded %d dictionary entries from %s", len(d), path)
        return d

    def get(self, simplified: str) -> Optional[CedictEntry]:
        return self._entries.get(simplified)

    def __contains__(self, simplified: object) -> bool:
        return simplified in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
