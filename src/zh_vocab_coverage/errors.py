"""
errors.py

What this file does:
- Defines the error taxonomy shared by every stage of the coverage pipeline.

How it fits:
- Source-level errors (SourceUnavailable) abort a run before any processing.
- Record-level errors (MalformedRecord, ReconstructionMismatch) are caught by the
  pass that raised them, counted, logged, and never abort the batch.
- ConvergenceExhausted is raised on request by callers that want the forced-stop
  state surfaced as an exception.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class CoverageError(Exception):
    """Base class for all pipeline errors."""


class SourceUnavailable(CoverageError):
    def __init__(self, source: str, path: str | Path | None = None, reason: str = "not found") -> None:
        self.source = source
        self.path = None if path is None else str(path)
        self.reason = reason
        where = f" ({self.path})" if self.path else ""
        super().__init__(f"{source} source unavailable{where}: {reason}")


class MalformedRecord(CoverageError):
    def __init__(self, source: str, line_no: Optional[int], raw: Any) -> None:
        self.source = source
        self.line_no = line_no
        self.raw = raw
        loc = f" line {line_no}" if line_no is not None else ""
        super().__init__(f"malformed {source} record{loc}: {raw!r}")


class ReconstructionMismatch(CoverageError):
    def __init__(self, original: str, reconstructed: str) -> None:
        self.original = original
        self.reconstructed = reconstructed
        super().__init__(
            f"reconstruction mismatch: original={original!r}, reconstructed={reconstructed!r}"
        )


class ConvergenceExhausted(CoverageError):
    def __init__(self, state: Any) -> None:
        self.state = state
        reason = getattr(state, "exhausted_reason", None) or "iteration ceiling"
        unresolved = len(getattr(state, "unresolved", []) or [])
        super().__init__(
            f"convergence stopped before completion ({reason}); "
            f"{unresolved} unresolved chunks need manual review"
        )
