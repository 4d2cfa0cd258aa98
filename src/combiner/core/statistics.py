# src/combiner/core/statistics.py
import threading
import time
from pathlib import Path
from typing import Optional, Union

from combiner.models import Statistics


class StatisticsAggregator:
    """
    Counters shared by every worker of a run. Each operation holds one
    lock, so the (max_tokens, max_tokens_file) pair always changes together.
    """

    def __init__(self, output_file: Union[str, Path]):
        self._lock = threading.Lock()
        self._started = time.perf_counter()
        self._elapsed: Optional[float] = None
        self.output_file = str(output_file)
        self.files_processed = 0
        self.files_skipped = 0
        # The root directory counts as visited
        self.directories_visited = 1
        self.total_tokens = 0
        self.max_tokens = 0
        self.max_tokens_file = ""

    def increment_processed(self) -> None:
        with self._lock:
            self.files_processed += 1

    def increment_skipped(self) -> None:
        with self._lock:
            self.files_skipped += 1

    def increment_directories_visited(self) -> None:
        with self._lock:
            self.directories_visited += 1

    def update_token_stats(self, tokens: int, path: str) -> None:
        with self._lock:
            self.total_tokens += tokens
            if tokens > self.max_tokens:
                self.max_tokens = tokens
                self.max_tokens_file = path

    def finalize(self) -> Statistics:
        """Freezes the elapsed time. Call once, after every worker has finished."""
        with self._lock:
            if self._elapsed is not None:
                raise RuntimeError("statistics already finalized")
            self._elapsed = time.perf_counter() - self._started
        return self.snapshot()

    def snapshot(self) -> Statistics:
        with self._lock:
            if self._elapsed is None:
                elapsed = time.perf_counter() - self._started
            else:
                elapsed = self._elapsed
            return Statistics(
                output_file=self.output_file,
                files_processed=self.files_processed,
                files_skipped=self.files_skipped,
                directories_visited=self.directories_visited,
                total_tokens=self.total_tokens,
                max_tokens=self.max_tokens,
                max_tokens_file=self.max_tokens_file,
                elapsed_seconds=elapsed,
            )
