#!/usr/bin/env python3
"""
clean_tatoeba.py

Purpose:
  Clean a Tatoeba sentence-pairs export into the corpus TSV the pipeline reads.

Input:
  - Tatoeba pairs file: "zh_id<TAB>zh<TAB>en_id<TAB>en" (no header, may start with a BOM)

Output:
  - UTF-8 TSV with header "id<TAB>zh<TAB>en"
  - Guarantees:
      * Chinese side converted to simplified (OpenCC t2s)
      * No duplicate Chinese sentences (first pair wins)
      * Basic length filtering

Usage:
  PYTHONPATH=src python scripts/clean_tatoeba.py data/raw/tatoeba_cmn_eng.tsv data/processed/sentences_tatoeba.simplified.tsv
"""

from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import Optional

from opencc import OpenCC

from zh_vocab_coverage.corpus.sources import CorpusRow
from zh_vocab_coverage.errors import SourceUnavailable
from zh_vocab_coverage.text.classify import contains_cjk
from zh_vocab_coverage.utils.io import write_tsv

_WS_RE = re.compile(r"\s+")


def parse_pair(line: str) -> Optional[CorpusRow]:
    line = line.lstrip("\ufeff").rstrip("\r\n")
    if not line:
        return None
    parts = line.split("\t")
    if len(parts) < 2:
        return None
    zh_id, zh = parts[0].strip(), _WS_RE.sub("", parts[1])
    en = parts[3].strip() if len(parts) > 3 else ""
    if not zh_id or not zh:
        return None
    return CorpusRow(id=int(zh_id) if zh_id.isdigit() else zh_id, zh=zh, en=en)


def process_pair(row: CorpusRow, cc_t2s: OpenCC, min_len: int, max_len: int) -> Optional[CorpusRow]:
    zh = cc_t2s.convert(row.zh)
    if not (min_len <= len(zh) <= max_len):
        return None
    if not contains_cjk(zh):
        return None
    return CorpusRow(id=row.id, zh=zh, en=row.en)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("in_path", help="Tatoeba pairs TSV")
    ap.add_argument("out_path", help="Output corpus TSV (id, zh, en)")
    ap.add_argument("--min-len", type=int, default=2)
    ap.add_argument("--max-len", type=int, default=60)
    args = ap.parse_args()

    in_path = Path(args.in_path)
    if not in_path.exists():
        raise SourceUnavailable("corpus", in_path, "file not found")

    cc_t2s = OpenCC("t2s")
    seen = set()
    rows = []
    dropped = 0

    with in_path.open("r", encoding="utf-8", errors="ignore") as f:
        for line in f:
            row = parse_pair(line)
            row = process_pair(row, cc_t2s, args.min_len, args.max_len) if row else None
            if row is None:
                dropped += 1
                continue
            if row.zh in seen:
                dropped += 1
                continue
            seen.add(row.zh)
            rows.append({"id": row.id, "zh": row.zh, "en": row.en})

    write_tsv(args.out_path, rows, ("id", "zh", "en"))
    print(f"✅ wrote {len(rows)} simplified sentences to {args.out_path} (dropped {dropped})")


if __name__ == "__main__":
    main()
