# src/combiner/core/output.py
import re
import threading
from pathlib import Path
from typing import Iterable, List, Tuple

from combiner.errors import OutputError

HEADER_TEMPLATE = "--- File: {path} ---\n"
_HEADER_RE = re.compile(r"^--- File: (?P<path>.+) ---$", re.MULTILINE)


def format_record(path: str, content: str) -> str:
    """Header line, raw content, then a blank line."""
    return f"{HEADER_TEMPLATE.format(path=path)}{content}\n\n"


def split_records(text: str) -> List[Tuple[str, str]]:
    """
    Splits a combined artifact back into (path, content) pairs. A content
    line that itself looks like a header will split the record there.
    """
    records = []
    matches = list(_HEADER_RE.finditer(text))
    for i, match in enumerate(matches):
        start = match.end() + 1
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[start:end]
        if body.endswith("\n\n"):
            body = body[:-2]
        records.append((match.group("path"), body))
    return records


class OutputWriter:
    """
    Owns the combined output file. The file is truncated on open;
    write_record may be called from many threads at once.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.records_written = 0
        try:
            self._handle = open(self.path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise OutputError(self.path, e) from e

    def __enter__(self) -> "OutputWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write_record(self, path: str, content: str) -> None:
        record = format_record(path, content)
        with self._lock:
            try:
                self._handle.write(record)
            except OSError as e:
                raise OutputError(self.path, e) from e
            self.records_written += 1

    def write_records(self, records: Iterable[Tuple[str, str]]) -> None:
        for path, content in records:
            self.write_record(path, content)

    def close(self) -> None:
        with self._lock:
            if self._handle.closed:
                return
            try:
                self._handle.close()
            except OSError as e:
                raise OutputError(self.path, e) from e
