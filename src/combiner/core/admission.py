# src/combiner/core/admission.py
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from combiner.config import DEFAULT_OUTPUT_PREFIX, DEFAULT_TEXT_EXTENSIONS
from combiner.core.matcher import GlobMatcher, PatternMatcher


def _clean(patterns: Optional[Iterable[str]]) -> tuple:
    return tuple(p.strip() for p in patterns or () if p and p.strip())


class AdmissionFilter:
    """
    Decides whether a file takes part in the combined output.
    Paths are root-relative POSIX strings; ignore always beats include.
    """

    def __init__(
        self,
        ignore_patterns: Optional[Iterable[str]] = None,
        include_patterns: Optional[Iterable[str]] = None,
        matcher: Optional[PatternMatcher] = None,
        extensions: Optional[Iterable[str]] = None,
        output_prefix: str = DEFAULT_OUTPUT_PREFIX,
        include_hidden: bool = True,
    ):
        self.ignore_patterns = _clean(ignore_patterns)
        self.include_patterns = _clean(include_patterns)
        self.matcher = matcher or GlobMatcher()
        exts = DEFAULT_TEXT_EXTENSIONS if extensions is None else extensions
        self.extensions = frozenset(e.lower().lstrip(".") for e in exts)
        self.output_prefix = output_prefix
        self.include_hidden = include_hidden

    def is_text_like(self, rel_path: str) -> bool:
        suffix = PurePosixPath(rel_path).suffix
        return bool(suffix) and suffix[1:].lower() in self.extensions

    def is_ignored(self, rel_path: str) -> bool:
        path = PurePosixPath(rel_path)
        if self.output_prefix and path.name.startswith(self.output_prefix):
            return True
        if not self.include_hidden and any(part.startswith(".") for part in path.parts):
            return True
        return any(self.matcher.matches(p, rel_path) for p in self.ignore_patterns)

    def is_included(self, rel_path: str) -> bool:
        if not self.include_patterns:
            return True
        return any(self.matcher.matches(p, rel_path) for p in self.include_patterns)

    def skip_reason(self, rel_path: str, abs_path: Optional[Path] = None) -> Optional[str]:
        """Returns why a path is rejected, or None when it is admitted."""
        if abs_path is not None and not abs_path.is_file():
            return "not a regular file"
        if self.is_ignored(rel_path):
            return "matches an ignore pattern"
        if not self.is_text_like(rel_path):
            return "not a text file"
        if not self.is_included(rel_path):
            return "matches no include pattern"
        return None

    def admits(self, rel_path: str, abs_path: Optional[Path] = None) -> bool:
        return self.skip_reason(rel_path, abs_path) is None
