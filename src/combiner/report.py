# src/combiner/report.py
from typing import List, Sequence

from combiner.models import CombineResult, FileRecord, SkipRecord, Statistics

TOP_FILES_TO_SHOW = 10
RULE = "-" * 60


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.2f} ms"
    return f"{seconds:.2f} s"


def format_statistics(stats: Statistics, tokenizer: str = "") -> str:
    rows = [
        ("Output File", stats.output_file),
        ("Files Processed", stats.files_processed),
        ("Files Skipped", stats.files_skipped),
        ("Directories Visited", stats.directories_visited),
        ("Total Tokens", stats.total_tokens),
        ("Max Tokens", stats.max_tokens),
        ("File with Max Tokens", stats.max_tokens_file or "-"),
        ("Processing Time", format_duration(stats.elapsed_seconds)),
    ]
    if tokenizer:
        rows.append(("Tokenizer", tokenizer))

    lines = [f"{'Statistic':<22} | Value", RULE]
    lines.extend(f"{name:<22} | {value}" for name, value in rows)
    lines.append(RULE)
    return "\n".join(lines)


def top_files(files: Sequence[FileRecord], limit: int = TOP_FILES_TO_SHOW) -> List[FileRecord]:
    """Sorts every record by tokens (largest first, then by path) and only then truncates."""
    ranked = sorted(files, key=lambda f: (-f.token_count, f.path))
    return ranked[:limit]


def format_top_files(files: Sequence[FileRecord], limit: int = TOP_FILES_TO_SHOW) -> str:
    ranked = top_files(files, limit)
    lines = [
        f"--- Top {len(ranked)} Files by Token Count ---",
        f"{'Rank':<5} | {'Tokens':<10} | {'Size (bytes)':<12} | File Path",
        RULE,
    ]
    for i, f in enumerate(ranked):
        lines.append(f"{i + 1:<5} | {f.token_count:<10} | {f.byte_size:<12} | {f.path}")
    lines.append(RULE)
    return "\n".join(lines)


def format_skipped_files(skipped: Sequence[SkipRecord]) -> str:
    lines = [f"--- Skipped Files ({len(skipped)}) ---", f"{'Reason':<30} | File Path", RULE]
    for s in sorted(skipped, key=lambda s: s.path):
        lines.append(f"{s.reason:<30} | {s.path}")
    lines.append(RULE)
    return "\n".join(lines)


def print_report(result: CombineResult, tokenizer: str = "", limit: int = TOP_FILES_TO_SHOW) -> None:
    print(format_statistics(result.statistics, tokenizer))
    if result.files and limit > 0:
        print()
        print(format_top_files(result.files, limit))
    if result.skipped:
        print()
        print(format_skipped_files(result.skipped))
