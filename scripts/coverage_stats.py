#!/usr/bin/env python3
# PYTHONPATH=src python scripts/coverage_stats.py data/vocab.db
import sys

from zh_vocab_coverage.pipeline.pipeline import coverage_stats
from zh_vocab_coverage.store.db import connect

db_path = sys.argv[1] if len(sys.argv) > 1 else "data/vocab.db"

conn = connect(db_path)
try:
    stats = coverage_stats(conn)
finally:
    conn.close()

print("Words:")
print(f"  HSK vocabulary:        {stats['words_hsk']:,}")
print(f"  Additional vocabulary: {stats['words_additional']:,}")
for source, n in stats["additional_by_source"].items():
    print(f"    {source or '(none)'}: {n:,}")
print(f"  Total known words:     {stats['known_words']:,}")
print(f"Sentences: {stats['sentences']:,}")
