"""
utils/log.py

What this file does:
- One place to configure logging for scripts and main.py:
  - Rich console handler (INFO by default)
  - optional plain log file in the output directory (DEBUG)

How it fits:
- Library modules only call logging.getLogger(__name__); they never configure
  handlers. Scripts call setup_logging() once at startup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
  level: int | str = logging.INFO,
  log_dir: Optional[str | Path] = None,
  log_name: str = "zh_vocab_coverage.log",
) -> logging.Logger:
  root = logging.getLogger()
  for h in root.handlers[:]:
    root.removeHandler(h)

  console = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
  console.setLevel(level)
  root.addHandler(console)
  root.setLevel(logging.DEBUG if log_dir is not None else level)

  if log_dir is not None:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_dir / log_name, mode="a", encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(fh)

  # jieba logs its dictionary load at DEBUG through its own logger
  logging.getLogger("jieba").setLevel(logging.WARNING)
  return logging.getLogger("zh_vocab_coverage")
