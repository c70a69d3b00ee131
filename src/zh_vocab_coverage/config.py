"""
config.py

What this file does:
- PipelineConfig: every knob of a pipeline run in one dataclass.
  Defaults are the values the project has always run with.
- to_json() / config_hash(): stable serialization stored in meta + runs, so two
  runs can be compared.

How it fits:
- Scripts build a PipelineConfig from argparse and pass it to run_pipeline().
- Library functions take plain keyword arguments; only the pipeline reads this.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class PipelineConfig:
    # sources
    cedict_path: str = "data/cedict_ts.u8"
    corpus_tsv: tuple[str, ...] = ()
    # read sentences from the db when no TSV corpus is given
    corpus_table: str = "sentences"
    db_path: Optional[str] = None
    hsk_json: Optional[str] = None
    entry_json: tuple[str, ...] = ()
    vocab_tables: tuple[str, ...] = ("words_hsk", "words_additional")
    simplify_corpus: bool = False

    # outputs
    out_dir: str = "out"
    write_db: bool = False

    # convergence
    max_iterations: int = 5
    max_piece_length: int = 6
    workers: int = 1
    batch_size: int = 500
    time_budget: Optional[float] = None
    row_budget: Optional[int] = None
    # chunks seen in fewer sentences are reported but not looked up
    min_frequency: int = 1

    # reports / quiz selection
    example_ids_limit: int = 5
    min_coverage: float = 0.80
    max_coverage: float = 0.95

    notes: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        self.corpus_tsv = tuple(str(p) for p in self.corpus_tsv)
        self.entry_json = tuple(str(p) for p in self.entry_json)
        self.vocab_tables = tuple(self.vocab_tables)
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        if self.max_piece_length < 1:
            raise ValueError("max_piece_length must be >= 1")
        if not 0.0 <= self.min_coverage <= self.max_coverage <= 1.0:
            raise ValueError(f"bad coverage window [{self.min_coverage}, {self.max_coverage}]")

    @property
    def out_path(self) -> Path:
        return Path(self.out_dir)

    def to_json(self) -> str:
        obj = asdict(self)
        obj.pop("notes", None)
        return json.dumps(obj, sort_keys=True, ensure_ascii=False)

    def config_hash(self) -> str:
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()
