# src/combiner/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass(frozen=True)
class Entry:
    """One filesystem node produced by a walker."""
    path: Path
    rel_path: str
    is_dir: bool = False


@dataclass(frozen=True)
class ProcessedFile:
    """Content and measurements of a file that was read successfully."""
    content: str
    token_count: int
    byte_size: int


@dataclass(frozen=True)
class FileRecord:
    path: str
    token_count: int
    byte_size: int


@dataclass(frozen=True)
class SkipRecord:
    path: str
    reason: str


@dataclass(frozen=True)
class Statistics:
    """Read-only snapshot of a run's counters."""
    output_file: str
    files_processed: int = 0
    files_skipped: int = 0
    directories_visited: int = 1
    total_tokens: int = 0
    max_tokens: int = 0
    max_tokens_file: str = ""
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class CombineResult:
    statistics: Statistics
    files: List[FileRecord] = field(default_factory=list)
    skipped: List[SkipRecord] = field(default_factory=list)
